from .appointment import Appointment, AppointmentStatus
from .contact import Contact

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "Contact",
]
