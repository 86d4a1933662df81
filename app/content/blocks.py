"""Editor block model - the stored shape of an article's content."""

import json
import math
import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


BlockType = Literal["header", "paragraph", "list", "image", "quote", "delimiter", "code", "table"]

BLOCK_TYPES = ("header", "paragraph", "list", "image", "quote", "delimiter", "code", "table")

EDITOR_VERSION = "2.30.7"

# ~2000 characters of serialized content per minute of reading
CHARS_PER_MINUTE = 2000


class ContentBlock(BaseModel):
    """
    One editor block: {"type": ..., "data": {...}}.

    `type` is left open so documents from newer editor plugins still
    round-trip; the renderer skips kinds it does not know.
    """
    id: Optional[str] = None
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)


class ContentDocument(BaseModel):
    """Ordered blocks as saved by the editor."""
    time: Optional[int] = None
    blocks: List[ContentBlock] = Field(default_factory=list)
    version: Optional[str] = None


def serialize_document(blocks: List[ContentBlock], saved_at: Optional[int] = None) -> str:
    """Serialize blocks to the JSON document string stored on the article."""
    document = ContentDocument(
        time=saved_at if saved_at is not None else int(time.time() * 1000),
        blocks=blocks,
        version=EDITOR_VERSION,
    )
    return json.dumps(document.model_dump(exclude_none=True), ensure_ascii=False)


def plain_text(blocks: List[ContentBlock]) -> str:
    """Text fed to the AI at publish time: each block's `text`, one per line."""
    return "\n".join(str(block.data.get("text") or "") for block in blocks)


def read_time_minutes(content: str) -> int:
    return max(1, math.ceil(len(content or "") / CHARS_PER_MINUTE))
