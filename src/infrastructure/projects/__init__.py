from src.infrastructure.projects.backend_client import BackendApiClient
from src.infrastructure.projects.in_memory import InMemorySessionStore

__all__ = ["BackendApiClient", "InMemorySessionStore"]
