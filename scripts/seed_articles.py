#!/usr/bin/env python3
"""
Seed a few demo articles (block documents plus one legacy plain-text story).

Goes through ArticleRepository so the schema fallbacks apply here too.
"""

import asyncio
import os
import sys

import certifi
from motor.motor_asyncio import AsyncIOMotorClient

# Make app package importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.articles.repository import ArticleRepository
from app.content.blocks import ContentBlock, plain_text, serialize_document
from app.ai.enrichment import fallback_summary
from app.core.config import get_settings

DEMO_AUTHOR = {"id": "seed-author", "name": "Pedium Editors"}

DEMO_ARTICLES = [
    {
        "title": "Writing in Blocks",
        "tags": ["Design", "Productivity"],
        "blocks": [
            {"type": "header", "data": {"level": 2, "text": "Why blocks?"}},
            {"type": "paragraph", "data": {"text": "Each paragraph, list and image is its own <b>block</b>."}},
            {"type": "list", "data": {"style": "unordered", "items": ["Reorder freely", "Mix media", "Render anywhere"]}},
            {"type": "delimiter", "data": {}},
            {"type": "quote", "data": {"text": "Structure is freedom.", "caption": "Someone, probably"}},
        ],
    },
    {
        "title": "A Tiny Python Table",
        "tags": ["Programming", "Technology"],
        "blocks": [
            {"type": "paragraph", "data": {"text": "Here is a loop and a table."}},
            {"type": "code", "data": {"code": "for i in range(3):\n    print(i)"}},
            {"type": "table", "data": {"content": [["n", "n squared"], ["2", "4"], ["3", "9"]]}},
        ],
    },
]

LEGACY_ARTICLE = {
    "title": "Before the Editor",
    "tags": ["Life"],
    "content": "This story predates the block editor.\n\nIt is stored as plain text.",
}


def get_client(uri: str) -> AsyncIOMotorClient:
    """Create Mongo client with TLS if needed."""
    client_kwargs = {}
    if "mongodb+srv://" in uri or "ssl=true" in uri.lower():
        client_kwargs["tlsCAFile"] = certifi.where()
    return AsyncIOMotorClient(uri, **client_kwargs)


async def seed_articles():
    settings = get_settings()
    client = get_client(settings.MONGO_URI)
    repo = ArticleRepository(client[settings.MONGO_DB_NAME])

    for article in DEMO_ARTICLES:
        blocks = [ContentBlock(**b) for b in article["blocks"]]
        doc = await repo.create_article(
            title=article["title"],
            content=serialize_document(blocks),
            summary=fallback_summary(plain_text(blocks)),
            user_id=DEMO_AUTHOR["id"],
            author_name=DEMO_AUTHOR["name"],
            tags=article["tags"],
        )
        print(f"Seeded {doc['id']}: {article['title']}")

    doc = await repo.create_article(
        title=LEGACY_ARTICLE["title"],
        content=LEGACY_ARTICLE["content"],
        summary=fallback_summary(LEGACY_ARTICLE["content"]),
        user_id=DEMO_AUTHOR["id"],
        author_name=DEMO_AUTHOR["name"],
        tags=LEGACY_ARTICLE["tags"],
    )
    print(f"Seeded {doc['id']}: {LEGACY_ARTICLE['title']} (legacy)")
    client.close()


if __name__ == "__main__":
    asyncio.run(seed_articles())
