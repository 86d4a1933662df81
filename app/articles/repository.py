"""Article, comment and follow data access with schema-drift fallbacks."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from fastapi import Depends
from pymongo.errors import OperationFailure, PyMongoError

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    PermissionDeniedException,
    SchemaDriftException,
)
from app.core.mongo_errors import (
    is_missing_index_error,
    is_permission_error,
    is_unknown_field_error,
    rejected_fields,
)

logger = logging.getLogger(__name__)

# Written on every deploy; anything else on an article is optional.
MINIMAL_ARTICLE_FIELDS = ("title", "content", "summary", "user_id", "author_name", "tags", "created_at")

DEFAULT_LIST_LIMIT = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_id(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


def _object_id(value: str, what: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise NotFoundException(f"{what} not found")
    return ObjectId(value)


class ArticleRepository:
    """
    Data access for articles, comments and follow edges.

    Tolerates a database provisioned for an older schema: writes retry
    without optional fields, sorted reads retry unsorted, compound lookups
    retry with client-side filtering.
    """

    def __init__(self, db):
        self.db = db
        settings = get_settings()
        self.articles_name = settings.ARTICLES_COLLECTION
        self.comments_name = settings.COMMENTS_COLLECTION
        self.follows_name = settings.FOLLOWS_COLLECTION

    def _articles_collection(self):
        return self.db[self.articles_name]

    def _comments_collection(self):
        return self.db[self.comments_name]

    def _follows_collection(self):
        return self.db[self.follows_name]

    @staticmethod
    def _raise_if_permission(exc: PyMongoError, action: str, collection: str):
        if is_permission_error(exc):
            raise PermissionDeniedException(action, collection) from exc

    async def _find_newest_first(self, collection, query: Dict[str, Any], limit: int) -> List[dict]:
        """Sorted by created_at desc; natural order if the sort cannot run."""
        try:
            docs = await collection.find(query).sort("created_at", -1).to_list(length=limit)
        except OperationFailure as e:
            self._raise_if_permission(e, "find", collection.name)
            logger.warning(f"Sorting {collection.name} failed (likely missing index), fetching unsorted: {e}")
            docs = await collection.find(query).to_list(length=limit)
        return [_with_id(d) for d in docs]

    # ========================================================================
    # Articles
    # ========================================================================

    async def create_article(
        self,
        *,
        title: str,
        content: str,
        summary: str,
        user_id: str,
        author_name: str,
        tags: List[str],
        cover_image_id: Optional[str] = None,
    ) -> dict:
        """
        Insert a new article.

        The extended document carries the social fields (views, liked_by).
        A collection whose validator predates them rejects the insert; in
        that case the article is stored with the minimal field set.
        """
        collection = self._articles_collection()
        minimal: Dict[str, Any] = {
            "title": title,
            "content": content,
            "summary": summary,
            "user_id": user_id,
            "author_name": author_name,
            "tags": list(tags),
            "created_at": _utcnow(),
        }
        if cover_image_id:
            minimal["cover_image_id"] = cover_image_id
        extended = {**minimal, "views": 0, "liked_by": []}

        try:
            result = await collection.insert_one(dict(extended))
            doc = extended
        except PyMongoError as e:
            self._raise_if_permission(e, "insert", collection.name)
            if not is_unknown_field_error(e):
                raise
            logger.warning(f"Extended article write rejected ({e}); retrying with minimal fields")
            try:
                result = await collection.insert_one(dict(minimal))
            except PyMongoError as retry_error:
                self._raise_if_permission(retry_error, "insert", collection.name)
                if not is_unknown_field_error(retry_error):
                    raise
                raise self._drift_for(retry_error, minimal) from retry_error
            doc = minimal

        doc = dict(doc)
        doc["_id"] = result.inserted_id
        return _with_id(doc)

    def _drift_for(self, exc: PyMongoError, document: Dict[str, Any]) -> SchemaDriftException:
        fields = rejected_fields(exc)
        if "cover_image_id" in fields or ("cover_image_id" in document and not fields):
            return SchemaDriftException(
                "cover_image_id",
                self.articles_name,
                hint=(
                    f"Add 'cover_image_id' as a string attribute to the '{self.articles_name}' "
                    "collection validator, or publish without a cover image."
                ),
            )
        element = ", ".join(fields) if fields else "attribute"
        return SchemaDriftException(
            element,
            self.articles_name,
            hint=f"Please update the '{self.articles_name}' collection attributes.",
        )

    async def list_articles(self, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
        """All articles, newest first when the index allows it."""
        return await self._find_newest_first(self._articles_collection(), {}, limit)

    async def list_user_articles(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
        return await self._find_newest_first(self._articles_collection(), {"user_id": user_id}, limit)

    async def get_article(self, article_id: str) -> dict:
        oid = _object_id(article_id, "Article")
        doc = await self._articles_collection().find_one({"_id": oid})
        if not doc:
            raise NotFoundException("Article not found")
        return _with_id(doc)

    async def _set_article_field(self, article_id: str, field: str, value: Any) -> None:
        oid = _object_id(article_id, "Article")
        collection = self._articles_collection()
        try:
            result = await collection.update_one({"_id": oid}, {"$set": {field: value}})
        except PyMongoError as e:
            self._raise_if_permission(e, "update", collection.name)
            if is_unknown_field_error(e):
                raise SchemaDriftException(
                    field,
                    collection.name,
                    hint=f"Add '{field}' to the '{collection.name}' collection to enable likes and views.",
                ) from e
            raise
        if result.matched_count == 0:
            raise NotFoundException("Article not found")

    async def set_liked_by(self, article_id: str, liked_by: List[str]) -> List[str]:
        """Replace the whole liking set (last write wins)."""
        unique = list(dict.fromkeys(liked_by))
        await self._set_article_field(article_id, "liked_by", unique)
        return unique

    async def set_views(self, article_id: str, views: int) -> int:
        """Replace the view counter; never moves it backwards."""
        current = await self.get_article(article_id)
        value = max(int(views), int(current.get("views") or 0))
        await self._set_article_field(article_id, "views", value)
        return value

    # ========================================================================
    # Comments
    # ========================================================================

    async def list_comments(self, article_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[dict]:
        """Comments on an article, newest first when the index allows it."""
        return await self._find_newest_first(self._comments_collection(), {"article_id": article_id}, limit)

    async def create_comment(self, article_id: str, user_id: str, author_name: str, content: str) -> dict:
        await self.get_article(article_id)

        doc = {
            "content": content,
            "article_id": article_id,
            "user_id": user_id,
            "author_name": author_name,
            "created_at": _utcnow(),
        }
        collection = self._comments_collection()
        try:
            result = await collection.insert_one(dict(doc))
        except PyMongoError as e:
            self._raise_if_permission(e, "insert", collection.name)
            raise
        doc["_id"] = result.inserted_id
        return _with_id(doc)

    # ========================================================================
    # Follows
    # ========================================================================

    async def find_follow(self, follower_id: str, following_id: str) -> Optional[dict]:
        """
        The edge follower -> following, if any.

        Without the compound index the exact query may be refused; then all
        of the follower's edges are fetched and filtered here.
        """
        collection = self._follows_collection()
        try:
            doc = await collection.find_one({"follower_id": follower_id, "following_id": following_id})
        except OperationFailure as e:
            self._raise_if_permission(e, "find", collection.name)
            if not is_missing_index_error(e):
                raise
            logger.warning(f"Compound follow lookup failed (missing index), filtering client-side: {e}")
            edges = await collection.find({"follower_id": follower_id}).to_list(length=None)
            doc = next((edge for edge in edges if edge.get("following_id") == following_id), None)
        return _with_id(doc)

    async def create_follow(self, follower_id: str, following_id: str) -> Tuple[dict, bool]:
        """
        Create follower -> following unless it already exists.

        Returns (edge, created). Check-then-create: two concurrent requests
        from the same follower can still both insert.
        """
        existing = await self.find_follow(follower_id, following_id)
        if existing:
            return existing, False

        doc = {
            "follower_id": follower_id,
            "following_id": following_id,
            "created_at": _utcnow(),
        }
        collection = self._follows_collection()
        try:
            result = await collection.insert_one(dict(doc))
        except PyMongoError as e:
            self._raise_if_permission(e, "insert", collection.name)
            raise
        doc["_id"] = result.inserted_id
        return _with_id(doc), True

    async def delete_follow(self, follow_id: str, follower_id: str) -> None:
        oid = _object_id(follow_id, "Follow")
        collection = self._follows_collection()
        edge = await collection.find_one({"_id": oid})
        if not edge:
            raise NotFoundException("Follow not found")
        if edge.get("follower_id") != follower_id:
            raise ForbiddenException("You can only remove your own follows")
        try:
            await collection.delete_one({"_id": oid})
        except PyMongoError as e:
            self._raise_if_permission(e, "remove", collection.name)
            raise

    async def count_followers(self, user_id: str) -> int:
        return await self._follows_collection().count_documents({"following_id": user_id})

    async def count_following(self, user_id: str) -> int:
        return await self._follows_collection().count_documents({"follower_id": user_id})


def get_article_repository(db=Depends(get_db)) -> ArticleRepository:
    return ArticleRepository(db)
