#!/usr/bin/env python3
"""
Install $jsonSchema validators on the Pedium collections.

Unknown fields are rejected, so a deploy that predates a field fails its
writes with "Document failed validation"; the API falls back to the
minimal article shape in that case.

    python scripts/apply_schema.py            # full schema (likes + views)
    python scripts/apply_schema.py --minimal  # schema without social fields
"""

import argparse
import asyncio
import os
import sys

import certifi
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import CollectionInvalid

# Make app package importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import get_settings


def get_client(uri: str) -> AsyncIOMotorClient:
    """Create Mongo client with TLS if needed."""
    client_kwargs = {}
    if "mongodb+srv://" in uri or "ssl=true" in uri.lower():
        client_kwargs["tlsCAFile"] = certifi.where()
    return AsyncIOMotorClient(uri, **client_kwargs)


def _schema(required: dict, optional: dict) -> dict:
    return {
        "$jsonSchema": {
            "bsonType": "object",
            "required": list(required),
            "additionalProperties": False,
            "properties": {"_id": {"bsonType": "objectId"}, **required, **optional},
        }
    }


def article_schema(minimal: bool) -> dict:
    required = {
        "title": {"bsonType": "string"},
        "content": {"bsonType": "string"},
        "summary": {"bsonType": "string"},
        "user_id": {"bsonType": "string"},
        "author_name": {"bsonType": "string"},
        "tags": {"bsonType": "array", "items": {"bsonType": "string"}},
        "created_at": {"bsonType": "date"},
    }
    optional = {"cover_image_id": {"bsonType": "string"}}
    if not minimal:
        optional["views"] = {"bsonType": ["int", "long"], "minimum": 0}
        optional["liked_by"] = {"bsonType": "array", "items": {"bsonType": "string"}}
    return _schema(required, optional)


def comment_schema() -> dict:
    return _schema(
        {
            "content": {"bsonType": "string"},
            "article_id": {"bsonType": "string"},
            "user_id": {"bsonType": "string"},
            "author_name": {"bsonType": "string"},
            "created_at": {"bsonType": "date"},
        },
        {},
    )


def follow_schema() -> dict:
    return _schema(
        {
            "follower_id": {"bsonType": "string"},
            "following_id": {"bsonType": "string"},
            "created_at": {"bsonType": "date"},
        },
        {},
    )


async def apply_validator(db, name: str, validator: dict):
    try:
        await db.create_collection(name, validator=validator)
        print(f"Created {name} with validator")
    except CollectionInvalid:
        await db.command("collMod", name, validator=validator)
        print(f"Updated validator on {name}")


async def main(minimal: bool):
    settings = get_settings()
    client = get_client(settings.MONGO_URI)
    db = client[settings.MONGO_DB_NAME]

    await apply_validator(db, settings.ARTICLES_COLLECTION, article_schema(minimal))
    await apply_validator(db, settings.COMMENTS_COLLECTION, comment_schema())
    await apply_validator(db, settings.FOLLOWS_COLLECTION, follow_schema())
    client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--minimal", action="store_true", help="omit views/liked_by from the article schema")
    args = parser.parse_args()
    asyncio.run(main(args.minimal))
