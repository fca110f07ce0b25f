from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from unconference.config import settings

_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    if _client is None:
        raise RuntimeError("MongoDB client is not initialized")
    return _client


def get_db() -> AsyncIOMotorDatabase:
    return get_client()[settings.mongodb_db_name]


async def connect_to_mongo() -> None:
    global _client
    if _client is not None:
        return

    _client = AsyncIOMotorClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        uuidRepresentation="standard",
    )


async def close_mongo_connection() -> None:
    global _client
    if _client is None:
        return

    _client.close()
    _client = None


async def ensure_mongo_indexes() -> None:
    db = get_db()

    await db["participants"].create_index(
        [("event_id", ASCENDING), ("registration_date", ASCENDING)],
        name="idx_participants_event_registration",
    )
    await db["topics"].create_index(
        [("event_id", ASCENDING), ("created_at", ASCENDING)],
        name="idx_topics_event_created_at",
    )
    await db["topic_rankings"].create_index(
        [("event_id", ASCENDING), ("participant_id", ASCENDING)],
        unique=True,
        name="uniq_topic_rankings_event_participant",
    )
    await db["organizers"].create_index(
        [("event_id", ASCENDING), ("participant_id", ASCENDING)],
        unique=True,
        name="uniq_organizers_event_participant",
    )
    await db["assignments"].create_index(
        [("event_id", ASCENDING), ("round_number", ASCENDING), ("group_number", ASCENDING)],
        name="idx_assignments_event_round_group",
    )
    await db["assignments"].create_index(
        [("event_id", ASCENDING), ("participant_id", ASCENDING)],
        name="idx_assignments_event_participant",
    )
