"""Remediation steps shown when the database is unreachable or incomplete."""

from typing import List

from app.core.config import get_settings


def setup_guide() -> List[str]:
    settings = get_settings()
    return [
        f"Check that MongoDB is reachable at MONGO_URI ({settings.MONGO_URI.split('@')[-1]}) "
        "and that this host is allowed by the server's network access list.",
        f"Confirm MONGO_DB_NAME is '{settings.MONGO_DB_NAME}'.",
        f"Create the collections '{settings.ARTICLES_COLLECTION}', '{settings.COMMENTS_COLLECTION}', "
        f"'{settings.FOLLOWS_COLLECTION}' and '{settings.USERS_COLLECTION}'.",
        "Articles need: title, content, summary, user_id, author_name, tags, created_at; "
        "optional: cover_image_id, views, liked_by. Run scripts/apply_schema.py to install the validators.",
        f"Add a descending index on created_at for '{settings.ARTICLES_COLLECTION}' "
        "(the feed works unsorted without it).",
        "Grant the application role find, insert, update and remove on all four collections.",
    ]
