"""In-process stores with the same transactional contract as the database ones."""
from aesthetica.infra.memory.session_store import InMemorySessionStore

__all__ = ["InMemorySessionStore"]
