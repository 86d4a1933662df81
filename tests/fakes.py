"""
In-memory stand-ins for the motor database API used by the repositories.

Only the calls the app makes are supported. Failures a real deployment
produces are switchable per collection:

- allowed_fields: reject inserts/$set of other fields with a validation WriteError
- fail_sort: sorted queries fail as if the created_at index were missing
- fail_compound: multi-field find_one fails as if no index could serve it
"""

import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Set

from bson import ObjectId
from pymongo.errors import OperationFailure, WriteError


def _get(doc: dict, path: str) -> Any:
    node: Any = doc
    for part in path.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _set(doc: dict, path: str, value: Any) -> None:
    parts = path.split(".")
    node = doc
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value


def _matches(doc: dict, query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        actual = _get(doc, key)
        if isinstance(expected, dict) and any(k.startswith("$") for k in expected):
            for op, operand in expected.items():
                if op == "$in" and actual not in operand:
                    return False
                if op == "$lt" and not (actual is not None and actual < operand):
                    return False
                if op == "$gt" and not (actual is not None and actual > operand):
                    return False
        elif isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


def validation_error(fields: List[str]) -> WriteError:
    return WriteError(
        "Document failed validation",
        code=121,
        details={
            "errInfo": {
                "details": {
                    "operatorName": "$jsonSchema",
                    "schemaRulesNotSatisfied": [
                        {"operatorName": "additionalProperties", "additionalProperties": fields}
                    ],
                }
            }
        },
    )


class FakeCursor:
    def __init__(self, collection: "FakeCollection", query: Dict[str, Any]):
        self.collection = collection
        self.query = query
        self._sort: Optional[tuple] = None
        self._limit: Optional[int] = None

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._sort = (key, direction)
        return self

    def limit(self, n: int) -> "FakeCursor":
        self._limit = n
        return self

    def _results(self) -> List[dict]:
        self.collection.queries.append({"query": self.query, "sort": self._sort})
        if self._sort and self.collection.fail_sort:
            raise OperationFailure(
                "Executor error during find command :: caused by :: Sort exceeded memory limit "
                "of 104857600 bytes, but did not opt in to external sorting.",
                code=292,
            )
        docs = [copy.deepcopy(d) for d in self.collection.docs if _matches(d, self.query)]
        if self._sort:
            key, direction = self._sort
            docs.sort(key=lambda d: _get(d, key), reverse=direction < 0)
        if self._limit is not None:
            docs = docs[: self._limit]
        return docs

    async def to_list(self, length: Optional[int] = None) -> List[dict]:
        docs = self._results()
        return docs if length is None else docs[:length]

    def __aiter__(self):
        self._iter = iter(self._results())
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.docs: List[dict] = []
        self.allowed_fields: Optional[Set[str]] = None
        self.fail_sort = False
        self.fail_compound = False
        self.fail_with: Optional[Exception] = None
        self.queries: List[dict] = []
        self.insert_attempts: List[dict] = []

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _validate(self, fields) -> None:
        if self.allowed_fields is None:
            return
        unknown = sorted(f.split(".")[0] for f in fields if f != "_id" and f.split(".")[0] not in self.allowed_fields)
        if unknown:
            raise validation_error(unknown)

    async def insert_one(self, doc: dict):
        self._check()
        self.insert_attempts.append(copy.deepcopy(doc))
        self._validate(doc.keys())
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query: Dict[str, Any], projection: Optional[dict] = None):
        self._check()
        if self.fail_compound and len(query) > 1:
            raise OperationFailure("error processing query: planner returned error :: No query solutions", code=291)
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query: Optional[Dict[str, Any]] = None, projection: Optional[dict] = None) -> FakeCursor:
        self._check()
        return FakeCursor(self, query or {})

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]):
        self._check()
        self._validate(update.get("$set", {}).keys())
        for doc in self.docs:
            if _matches(doc, query):
                for path, value in update.get("$set", {}).items():
                    _set(doc, path, copy.deepcopy(value))
                for path, value in update.get("$inc", {}).items():
                    _set(doc, path, (_get(doc, path) or 0) + value)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query: Dict[str, Any]):
        self._check()
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query: Dict[str, Any]) -> int:
        self._check()
        return sum(1 for d in self.docs if _matches(d, query))


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


class RecordingClient:
    """Stand-in for PediumClient that records calls and can be told to fail."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail: Set[str] = set()
        self.comments: List[dict] = []
        self.next_follow_id = "follow-1"

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise RuntimeError(f"{name} failed")

    async def set_likes(self, article_id, liked_by):
        self._record("set_likes", article_id, list(liked_by))
        return list(liked_by)

    async def set_views(self, article_id, views):
        self._record("set_views", article_id, views)
        return views

    async def follow(self, user_id):
        self._record("follow", user_id)
        return {"id": self.next_follow_id, "follower_id": "me", "following_id": user_id}

    async def unfollow(self, follow_id):
        self._record("unfollow", follow_id)

    async def create_comment(self, article_id, content):
        self._record("create_comment", article_id, content)
        comment = {"id": f"c{len(self.comments) + 1}", "article_id": article_id, "content": content}
        self.comments.insert(0, comment)
        return comment

    async def list_comments(self, article_id):
        self._record("list_comments", article_id)
        return list(self.comments)
