from __future__ import annotations

import asyncio
import logging
import weakref
from datetime import datetime
from typing import Optional

from bson import ObjectId
from fastapi import HTTPException, status
from pydantic import ValidationError

from unconference.algorithm import AssignmentInputError, TopicStrategy, generate_assignments
from unconference.config import settings
from unconference.database.collections import get_collection
from unconference.models.assignment import AssignmentInput
from unconference.models.event import Event, EventSettings
from unconference.models.participant import Participant
from unconference.models.ranking import TopicRanking
from unconference.models.statistics import AssignmentStatistics
from unconference.models.topic import Topic

logger = logging.getLogger(__name__)

ASSIGNMENT_SORT = [("round_number", 1), ("group_number", 1), ("_id", 1)]

# Regeneration deletes and rewrites an event's whole assignment set, so runs
# for the same event must not interleave. An entry disappears once no run
# holds or waits on its lock.
_generation_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def _now() -> datetime:
    return datetime.utcnow()


def _generation_lock(event_key: str) -> asyncio.Lock:
    lock = _generation_locks.get(event_key)
    if lock is None:
        lock = asyncio.Lock()
        _generation_locks[event_key] = lock
    return lock


def _parse_event_id(event_id: str) -> ObjectId:
    if not ObjectId.is_valid(event_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid event id")
    return ObjectId(event_id)


async def _find_event_or_404(event_oid: ObjectId) -> dict:
    events_collection = get_collection("events")
    event = await events_collection.find_one({"_id": event_oid})
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def _event_from_doc(doc: dict) -> Event:
    try:
        return Event(
            id=str(doc["_id"]),
            name=doc.get("name") or "",
            status=doc.get("status") or "draft",
            number_of_rounds=doc.get("number_of_rounds"),
            discussions_per_round=doc.get("discussions_per_round"),
            ideal_group_size=doc.get("ideal_group_size"),
            min_group_size=doc.get("min_group_size"),
            max_group_size=doc.get("max_group_size"),
            settings=EventSettings(**(doc.get("settings") or {})),
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event configuration is invalid: {e.error_count()} error(s)",
        )


def _participant_from_doc(doc: dict) -> Participant:
    return Participant(
        id=str(doc["_id"]),
        event_id=str(doc.get("event_id") or ""),
        user_id=str(doc["user_id"]) if doc.get("user_id") else None,
        status=doc.get("status") or "registered",
    )


def _topic_from_doc(doc: dict) -> Topic:
    return Topic(
        id=str(doc["_id"]),
        event_id=str(doc.get("event_id") or ""),
        title=doc.get("title") or "",
        status=doc.get("status") or "proposed",
    )


def _ranking_from_doc(doc: dict) -> TopicRanking:
    return TopicRanking(
        participant_id=str(doc["participant_id"]),
        event_id=str(doc.get("event_id") or ""),
        ranked_topic_ids=[str(t) for t in doc.get("ranked_topic_ids") or []],
    )


def serialize_assignment(doc: dict) -> dict:
    return {
        "id": str(doc["_id"]),
        "participant_id": str(doc["participant_id"]),
        "topic_id": str(doc["topic_id"]),
        "event_id": str(doc["event_id"]),
        "round_number": doc["round_number"],
        "group_number": doc["group_number"],
        "assignment_method": doc.get("assignment_method") or "automatic",
        "status": doc.get("status") or "assigned",
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
    }


async def load_assignment_input(event_oid: ObjectId, event: Event) -> AssignmentInput:
    participants_collection = get_collection("participants")
    topics_collection = get_collection("topics")
    rankings_collection = get_collection("topic_rankings")
    organizers_collection = get_collection("organizers")

    participant_docs = await (
        participants_collection.find({"event_id": event_oid})
        .sort([("registration_date", 1), ("_id", 1)])
        .to_list(length=None)
    )
    topic_docs = await (
        topics_collection.find({"event_id": event_oid})
        .sort([("created_at", 1), ("_id", 1)])
        .to_list(length=None)
    )
    ranking_docs = await (
        rankings_collection.find({"event_id": event_oid})
        .sort([("updated_at", 1), ("_id", 1)])
        .to_list(length=None)
    )
    organizer_docs = await organizers_collection.find({"event_id": event_oid}).to_list(length=None)

    participants = [_participant_from_doc(d) for d in participant_docs]
    user_ids = [p.user_id for p in participants if p.user_id]
    user_roles: dict[str, str] = {}
    if user_ids:
        users_collection = get_collection("users")
        users = await users_collection.find({"uid": {"$in": user_ids}}).to_list(length=None)
        user_roles = {u["uid"]: u.get("role") or "" for u in users if u.get("uid")}

    return AssignmentInput(
        event=event,
        participants=participants,
        topics=[_topic_from_doc(d) for d in topic_docs],
        rankings=[_ranking_from_doc(d) for d in ranking_docs if d.get("participant_id")],
        organizer_ids={str(d["participant_id"]) for d in organizer_docs if d.get("participant_id")},
        user_roles=user_roles,
    )


async def generate_assignments_for_event(
    *,
    event_id: str,
    topic_strategy: Optional[TopicStrategy] = None,
) -> tuple[list[dict], AssignmentStatistics, list[str]]:
    event_oid = _parse_event_id(event_id)
    event_doc = await _find_event_or_404(event_oid)
    event = _event_from_doc(event_doc)

    if not event.settings.enable_auto_assignment:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Automatic assignment is not enabled for this event",
        )

    assignments_collection = get_collection("assignments")
    events_collection = get_collection("events")

    async with _generation_lock(str(event_oid)):
        data = await load_assignment_input(event_oid, event)
        try:
            result = generate_assignments(
                data,
                topic_strategy=topic_strategy or settings.assignment_topic_strategy,
                repeat_pool_threshold=settings.assignment_repeat_pool_threshold,
            )
        except AssignmentInputError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        deleted = await assignments_collection.delete_many({"event_id": event_oid})
        logger.info(f"Cleared {deleted.deleted_count} previous assignments for event {event_id}")

        now = _now()
        docs = [
            {
                **a.model_dump(),
                "event_id": event_oid,
                "created_at": now,
                "updated_at": now,
            }
            for a in result.assignments
        ]
        if docs:
            await assignments_collection.insert_many(docs)

        stored_statistics = result.statistics.model_dump(mode="json")
        stored_statistics["generated_at"] = now
        await events_collection.update_one(
            {"_id": event_oid},
            {"$set": {"settings.last_assignment_statistics": stored_statistics, "updated_at": now}},
        )

        created = await (
            assignments_collection.find({"event_id": event_oid})
            .sort(ASSIGNMENT_SORT)
            .to_list(length=None)
        )

    logger.info(f"Generated {len(created)} assignments for event {event_id}")
    if result.warnings:
        logger.warning(f"Assignment warnings for event {event_id}: {result.warnings}")

    return created, result.statistics, result.warnings


async def list_assignments_for_event(*, event_id: str, round_number: Optional[int] = None) -> list[dict]:
    event_oid = _parse_event_id(event_id)
    await _find_event_or_404(event_oid)

    query: dict = {"event_id": event_oid}
    if round_number is not None:
        query["round_number"] = round_number

    assignments_collection = get_collection("assignments")
    return await assignments_collection.find(query).sort(ASSIGNMENT_SORT).to_list(length=None)


async def list_participant_assignments(*, event_id: str, participant_id: str) -> list[dict]:
    event_oid = _parse_event_id(event_id)
    await _find_event_or_404(event_oid)

    assignments_collection = get_collection("assignments")
    return await (
        assignments_collection.find({"event_id": event_oid, "participant_id": participant_id})
        .sort(ASSIGNMENT_SORT)
        .to_list(length=None)
    )


async def clear_assignments_for_event(*, event_id: str) -> int:
    event_oid = _parse_event_id(event_id)
    await _find_event_or_404(event_oid)

    assignments_collection = get_collection("assignments")
    async with _generation_lock(str(event_oid)):
        result = await assignments_collection.delete_many({"event_id": event_oid})
    logger.info(f"Deleted {result.deleted_count} assignments for event {event_id}")
    return result.deleted_count
