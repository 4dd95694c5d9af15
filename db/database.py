from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from core.config import AppSettings, settings


def create_motor_client(app_settings: AppSettings = settings) -> AsyncIOMotorClient:
    # One client per process; motor pools connections internally
    return AsyncIOMotorClient(app_settings.mongo_uri, appname="carcare-api")


def get_database(client: AsyncIOMotorClient, app_settings: AppSettings = settings) -> AsyncIOMotorDatabase:
    return client[app_settings.database_name]


def close_database(client: AsyncIOMotorClient) -> None:
    client.close()
