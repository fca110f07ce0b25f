"""
In-process document store used when STORAGE_BACKEND=memory.

Implements the subset of the motor collection API the services rely on
(find/find_one/insert/update/delete with equality, ``$in`` and ``$exists``
filters). Documents are copied on the way in and out so callers never share
state with the store.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from bson import ObjectId

SortSpec = list[tuple[str, int]]


class InsertOneResult:
    def __init__(self, inserted_id: Any):
        self.inserted_id = inserted_id


class InsertManyResult:
    def __init__(self, inserted_ids: list[Any]):
        self.inserted_ids = inserted_ids


class UpdateResult:
    def __init__(self, matched_count: int, modified_count: int):
        self.matched_count = matched_count
        self.modified_count = modified_count


class DeleteResult:
    def __init__(self, deleted_count: int):
        self.deleted_count = deleted_count


def _get_path(doc: dict, path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _has_path(doc: dict, path: str) -> bool:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return False
        value = value[part]
    return True


def _set_path(doc: dict, path: str, value: Any) -> None:
    parts = path.split(".")
    target = doc
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[parts[-1]] = value


def _matches(doc: dict, query: Optional[dict]) -> bool:
    for key, expected in (query or {}).items():
        if isinstance(expected, dict) and "$in" in expected:
            if _get_path(doc, key) not in expected["$in"]:
                return False
            continue
        if isinstance(expected, dict) and "$exists" in expected:
            if bool(expected["$exists"]) != _has_path(doc, key):
                return False
            continue
        actual = _get_path(doc, key)
        # Mongo matches array fields by membership.
        if isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
            continue
        if actual != expected:
            return False
    return True


def _sort_docs(docs: list[dict], spec: SortSpec) -> list[dict]:
    def sort_key(key: str):
        def extract(doc: dict) -> tuple:
            value = _get_path(doc, key)
            # Missing values sort first, as in MongoDB.
            return (0, 0) if value is None else (1, value)

        return extract

    ordered = list(docs)
    for key, direction in reversed(spec):
        ordered.sort(key=sort_key(key), reverse=direction < 0)
    return ordered


class InMemoryCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs
        self._sort: SortSpec = []

    def sort(self, key_or_list, direction: Optional[int] = None) -> "InMemoryCursor":
        if isinstance(key_or_list, str):
            self._sort = [(key_or_list, direction or 1)]
        else:
            self._sort = list(key_or_list)
        return self

    async def to_list(self, *, length: Optional[int] = None) -> list[dict]:
        docs = _sort_docs(self._docs, self._sort) if self._sort else list(self._docs)
        if length is not None:
            docs = docs[:length]
        return [copy.deepcopy(d) for d in docs]


class InMemoryCollection:
    def __init__(self, name: str):
        self.name = name
        self._docs: list[dict] = []

    def find(self, query: Optional[dict] = None) -> InMemoryCursor:
        return InMemoryCursor([d for d in self._docs if _matches(d, query)])

    async def find_one(self, query: Optional[dict] = None, sort: Optional[SortSpec] = None) -> Optional[dict]:
        docs = [d for d in self._docs if _matches(d, query)]
        if sort:
            docs = _sort_docs(docs, sort)
        return copy.deepcopy(docs[0]) if docs else None

    async def count_documents(self, query: Optional[dict] = None) -> int:
        return sum(1 for d in self._docs if _matches(d, query))

    async def insert_one(self, doc: dict) -> InsertOneResult:
        if "_id" not in doc:
            doc["_id"] = ObjectId()
        self._docs.append(copy.deepcopy(doc))
        return InsertOneResult(doc["_id"])

    async def insert_many(self, docs: list[dict]) -> InsertManyResult:
        inserted_ids = []
        for doc in docs:
            result = await self.insert_one(doc)
            inserted_ids.append(result.inserted_id)
        return InsertManyResult(inserted_ids)

    async def update_one(self, query: dict, update: dict) -> UpdateResult:
        for doc in self._docs:
            if not _matches(doc, query):
                continue
            for path, value in (update.get("$set") or {}).items():
                _set_path(doc, path, copy.deepcopy(value))
            return UpdateResult(matched_count=1, modified_count=1)
        return UpdateResult(matched_count=0, modified_count=0)

    async def delete_one(self, query: dict) -> DeleteResult:
        for i, doc in enumerate(self._docs):
            if _matches(doc, query):
                self._docs.pop(i)
                return DeleteResult(1)
        return DeleteResult(0)

    async def delete_many(self, query: dict) -> DeleteResult:
        kept = [d for d in self._docs if not _matches(d, query)]
        deleted = len(self._docs) - len(kept)
        self._docs = kept
        return DeleteResult(deleted)


class InMemoryDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection] = {}

    def __getitem__(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]

    def drop_all(self) -> None:
        self._collections.clear()


_memory_db = InMemoryDatabase()


def get_memory_db() -> InMemoryDatabase:
    return _memory_db
