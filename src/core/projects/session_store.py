from typing import Any, Optional, Protocol


class SessionStore(Protocol):
    def get(self, journey_id: str) -> Optional[dict[str, Any]]: ...

    def set(self, journey_id: str, draft: dict[str, Any]) -> None: ...

    def clear(self, journey_id: str) -> None: ...
