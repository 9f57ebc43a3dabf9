"""Lightweight models package initialiser.

- Exposes the shared SQLAlchemy `Base`.
- Lazily exposes the domain models via module-level attribute access so that domain
  model modules importing `Base` don't import each other in a cycle.
- `liveone.models.registry` imports every model; Alembic imports it for metadata discovery.
"""

from liveone.models.base import Base

__all__ = ["Base"]


def __getattr__(name: str):
    import importlib

    _registry = importlib.import_module("liveone.models.registry")

    if hasattr(_registry, name):
        return getattr(_registry, name)
    raise AttributeError(f"module 'liveone.models' has no attribute {name!r}")


def __dir__():
    import importlib

    _registry = importlib.import_module("liveone.models.registry")

    return sorted(set(list(globals().keys()) + list(_registry.__all__)))
