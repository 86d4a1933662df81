"""Device-local record of article views already counted."""

import json
import logging
from pathlib import Path
from typing import Optional, Set, Union

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class ViewedSet:
    """
    Article ids this device has already counted, persisted as a JSON list.

    Advisory only: another device or a cleared file counts again. An
    unreadable file is treated as empty.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or get_settings().VIEWED_STORE_PATH).expanduser()
        self._ids: Optional[Set[str]] = None

    def _load(self) -> Set[str]:
        if self._ids is None:
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                self._ids = {str(i) for i in raw} if isinstance(raw, list) else set()
            except FileNotFoundError:
                self._ids = set()
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable viewed store {self.path}: {e}")
                self._ids = set()
        return self._ids

    def __contains__(self, article_id: str) -> bool:
        return article_id in self._load()

    def __len__(self) -> int:
        return len(self._load())

    def add(self, article_id: str) -> None:
        ids = self._load()
        if article_id in ids:
            return
        ids.add(article_id)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(sorted(ids)), encoding="utf-8")
        except OSError as e:
            # Still remembered for this process.
            logger.warning(f"Could not persist viewed store {self.path}: {e}")
