"""Backend selection.

`build_backend` picks the implementation named by `MODERATION_BACKEND`.
"""

from liveone.backends.base import BackendError, ConflictError, ModerationBackend


def build_backend(settings, session_factory=None) -> ModerationBackend:
    if settings.moderation_backend == "supabase":
        from liveone.backends.supabase_backend import SupabaseBackend

        return SupabaseBackend.from_settings(settings)

    from liveone.backends.sqlalchemy_backend import SqlAlchemyBackend

    if session_factory is None:
        from liveone.core.database import SessionLocal

        session_factory = SessionLocal
    return SqlAlchemyBackend(session_factory)


__all__ = ["BackendError", "ConflictError", "ModerationBackend", "build_backend"]
