"""Publishing and feed assembly."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

from app.ai.enrichment import EnrichmentClient
from app.articles.models import ArticleDetailResponse, ArticleListItem, PublishArticleRequest
from app.articles.repository import ArticleRepository
from app.content.blocks import plain_text, read_time_minutes, serialize_document
from app.content.renderer import render
from app.core.aws import resolve_image_url
from app.core.exceptions import BadRequestException

logger = logging.getLogger(__name__)


CATEGORIES = [
    "Technology",
    "Life",
    "Productivity",
    "Artificial Intelligence",
    "Design",
    "Culture",
    "Programming",
]


def author_avatar_url(author_name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(author_name or '')}&background=0d9488&color=fff"


def placeholder_cover_url(article_id: str) -> str:
    return f"https://picsum.photos/seed/{article_id}/800/600"


def filter_feed(articles: List[dict], category: Optional[str] = None, search: Optional[str] = None) -> List[dict]:
    """Category keeps articles tagged with it; search matches title or summary."""
    if category:
        articles = [a for a in articles if category in (a.get("tags") or [])]
    if search:
        term = search.lower()
        articles = [
            a for a in articles
            if term in (a.get("title") or "").lower() or term in (a.get("summary") or "").lower()
        ]
    return articles


def to_list_item(doc: dict) -> ArticleListItem:
    cover_url = resolve_image_url(doc.get("cover_image_id"), preview=True) or placeholder_cover_url(doc["id"])
    return ArticleListItem(
        id=doc["id"],
        title=doc.get("title", ""),
        summary=doc.get("summary") or "",
        user_id=doc.get("user_id", ""),
        author_name=doc.get("author_name", ""),
        author_avatar_url=author_avatar_url(doc.get("author_name", "")),
        tags=doc.get("tags") or [],
        created_at=doc["created_at"],
        cover_image_id=doc.get("cover_image_id"),
        cover_url=cover_url,
        views=int(doc.get("views") or 0),
        like_count=len(doc.get("liked_by") or []),
        read_time_minutes=read_time_minutes(doc.get("content", "")),
    )


def to_detail(doc: dict) -> ArticleDetailResponse:
    content = doc.get("content") or ""
    return ArticleDetailResponse(
        id=doc["id"],
        title=doc.get("title", ""),
        content=content,
        summary=doc.get("summary") or "",
        user_id=doc.get("user_id", ""),
        author_name=doc.get("author_name", ""),
        tags=doc.get("tags") or [],
        created_at=doc["created_at"],
        cover_image_id=doc.get("cover_image_id"),
        cover_url=resolve_image_url(doc.get("cover_image_id")),
        views=int(doc.get("views") or 0),
        liked_by=doc.get("liked_by") or [],
        read_time_minutes=read_time_minutes(content),
        body=render(content),
    )


class PublishService:
    """Turns editor output into a stored article."""

    def __init__(self, repository: ArticleRepository, enrichment: EnrichmentClient):
        self.repository = repository
        self.enrichment = enrichment

    async def publish(self, user: dict, request: PublishArticleRequest) -> dict:
        if not request.title:
            raise BadRequestException("Please add a title.")
        if not request.blocks:
            raise BadRequestException("Please write some content before publishing.")

        logger.info(f"Publish [{user['id']}]: Saving content")
        content = serialize_document(request.blocks)
        text = plain_text(request.blocks)

        logger.info(f"Publish [{user['id']}]: Generating AI summary & tags")
        summary = await self.enrichment.summarize(text)
        tags = await self.enrichment.suggest_tags(text)

        logger.info(f"Publish [{user['id']}]: Publishing to Pedium")
        article = await self.repository.create_article(
            title=request.title,
            content=content,
            summary=summary,
            user_id=user["id"],
            author_name=user.get("name") or user.get("email", ""),
            tags=tags,
            cover_image_id=request.cover_image_id,
        )
        logger.info(f"Publish [{user['id']}]: Done! article={article['id']}")
        return article
