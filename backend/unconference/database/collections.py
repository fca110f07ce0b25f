from typing import Union

from motor.motor_asyncio import AsyncIOMotorCollection

from unconference.config import settings
from unconference.database.connection import get_db
from unconference.database.memory import InMemoryCollection, get_memory_db


def get_collection(name: str) -> Union[AsyncIOMotorCollection, InMemoryCollection]:
    if settings.storage_backend == "memory":
        return get_memory_db()[name]
    return get_db()[name]
