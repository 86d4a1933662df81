"""
Block renderer.

Maps a serialized editor document to display nodes. Content written before
the block editor existed is plain text, so anything that does not parse as
a block document is rendered as newline-delimited paragraphs instead.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


NodeKind = Literal["heading", "paragraph", "list", "image", "quote", "delimiter", "code", "table"]

HEADER_LEVELS = (1, 3)


class DisplayNode(BaseModel):
    """One renderable unit. Inline-formatted text keeps the editor's markup."""
    kind: NodeKind
    text: Optional[str] = None
    level: Optional[int] = None
    ordered: Optional[bool] = None
    items: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    caption: Optional[str] = None
    rows: List[List[str]] = Field(default_factory=list)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _list_item(item: Any) -> str:
    # Nested-list editor output stores items as {"content": ..., "items": [...]}.
    if isinstance(item, dict):
        return _text(item.get("content"))
    return _text(item)


def _header(data: Dict[str, Any]) -> DisplayNode:
    low, high = HEADER_LEVELS
    level = min(max(int(data.get("level", 2)), low), high)
    return DisplayNode(kind="heading", level=level, text=_text(data.get("text")))


def _paragraph(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(kind="paragraph", text=_text(data.get("text")))


def _list(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(
        kind="list",
        ordered=data.get("style") == "ordered",
        items=[_list_item(item) for item in data["items"]],
    )


def _image(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(
        kind="image",
        url=_text(data["file"]["url"]),
        caption=_optional_text(data.get("caption")),
    )


def _quote(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(
        kind="quote",
        text=_text(data.get("text")),
        caption=_optional_text(data.get("caption")),
    )


def _delimiter(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(kind="delimiter")


def _code(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(kind="code", text=_text(data.get("code")))


def _table(data: Dict[str, Any]) -> DisplayNode:
    return DisplayNode(
        kind="table",
        rows=[[_text(cell) for cell in row] for row in data["content"]],
    )


RENDERERS: Dict[str, Callable[[Dict[str, Any]], DisplayNode]] = {
    "header": _header,
    "paragraph": _paragraph,
    "list": _list,
    "image": _image,
    "quote": _quote,
    "delimiter": _delimiter,
    "code": _code,
    "table": _table,
}


def _render_blocks(serialized_document: str) -> List[DisplayNode]:
    document = json.loads(serialized_document)
    blocks = document["blocks"]
    if not isinstance(blocks, list):
        raise TypeError("blocks must be a list")

    nodes: List[DisplayNode] = []
    for block in blocks:
        kind = block.get("type") if isinstance(block, dict) else None
        if not isinstance(kind, str) or kind not in RENDERERS:
            continue
        renderer = RENDERERS[kind]
        data = block.get("data") or {}
        nodes.append(renderer(data))
    return nodes


def render_legacy(content: str) -> List[DisplayNode]:
    """Plain-text content: one paragraph per line, empty lines included."""
    return [DisplayNode(kind="paragraph", text=line) for line in content.split("\n")]


def render(serialized_document: str) -> List[DisplayNode]:
    """Render stored article content. Never raises."""
    if not isinstance(serialized_document, str):
        serialized_document = _text(serialized_document)
    try:
        return _render_blocks(serialized_document)
    except Exception as e:
        logger.debug(f"Rendering content as legacy text: {e}")
        return render_legacy(serialized_document)
