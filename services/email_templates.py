"""Plain-text bodies for booking and contact notifications."""

from __future__ import annotations

from datetime import date

from models.appointment import Appointment
from models.contact import Contact

APPOINTMENT_ADMIN_SUBJECT = "New Appointment Booked"
APPOINTMENT_CUSTOMER_SUBJECT = "Appointment Confirmation"
CONTACT_CUSTOMER_SUBJECT = "We Received Your Message"


def format_date(value: date) -> str:
    # e.g. "Wed May 01 2024"
    return value.strftime("%a %b %d %Y")


def appointment_admin_body(record: Appointment) -> str:
    return (
        "New booking received:\n\n"
        f"Name: {record.name}\n"
        f"Email: {record.email}\n"
        f"Phone: {record.phone}\n"
        f"Service: {record.service}\n"
        f"Date: {format_date(record.date)} at {record.time}\n"
        f"Car: {record.car_model}\n"
        f"Address: {record.address}\n"
        f"Message: {record.message or 'N/A'}\n"
        f"Status: {record.status.value}\n"
        f"Reference: {record.id}\n"
    )


def appointment_customer_body(record: Appointment, business_name: str) -> str:
    return (
        f"Hi {record.name},\n\n"
        f"Your appointment has been successfully booked with {business_name}.\n\n"
        f"Date: {format_date(record.date)}\n"
        f"Time: {record.time}\n"
        f"Service: {record.service}\n"
        f"Car: {record.car_model}\n\n"
        "We will contact you shortly. Thank you for choosing us!\n\n"
        f"- {business_name} Team\n"
    )


def contact_admin_subject(record: Contact) -> str:
    return f"New Contact Form: {record.subject}"


def contact_admin_body(record: Contact) -> str:
    return (
        "New contact form submission:\n\n"
        f"Name: {record.name}\n"
        f"Email: {record.email}\n"
        f"Phone: {record.phone or 'N/A'}\n"
        f"Subject: {record.subject}\n"
        f"Message: {record.message}\n"
    )


def contact_customer_body(record: Contact, business_name: str) -> str:
    return (
        f"Hi {record.name},\n\n"
        f"Thank you for contacting {business_name}.\n"
        "We have received your message and our team will get back to you soon.\n\n"
        f"Subject: {record.subject}\n"
        f"Message: {record.message}\n\n"
        f"- {business_name} Team\n"
    )
