"""Core database access helpers.

Re-exports the engine and session factories from
`liveone.core.database.session` alongside the shared declarative `Base`.
"""

from liveone.models.base import Base

from .session import SessionLocal, build_engine, build_session_factory, engine

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "build_engine",
    "build_session_factory",
]
