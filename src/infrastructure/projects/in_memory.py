from copy import deepcopy
from threading import Lock
from typing import Any, Optional

from src.core.projects.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._lock = Lock()
        self._drafts: dict[str, dict[str, Any]] = {}

    def get(self, journey_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            draft = self._drafts.get(journey_id)
            return deepcopy(draft) if draft is not None else None

    def set(self, journey_id: str, draft: dict[str, Any]) -> None:
        with self._lock:
            self._drafts[journey_id] = deepcopy(draft)

    def clear(self, journey_id: str) -> None:
        with self._lock:
            self._drafts.pop(journey_id, None)
