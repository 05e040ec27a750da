"""Built-in source discovery."""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from pwsweep.core.registry import SourceRegistry
from pwsweep.models.source import CandidateSource

log = logging.getLogger(__name__)


def _find_sources_in_module(module: ModuleType) -> list[type[CandidateSource]]:
    """Find concrete CandidateSource subclasses defined in a module."""
    sources: list[type[CandidateSource]] = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if (
            issubclass(obj, CandidateSource)
            and obj.__module__ == module.__name__
            and not inspect.isabstract(obj)
            and not obj.__name__.startswith("_")
        ):
            sources.append(obj)
    return sources


def _load_builtin_sources() -> list[type[CandidateSource]]:
    """Load sources from the pwsweep.sources package."""
    import pwsweep.sources as sources_pkg

    found: list[type[CandidateSource]] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(sources_pkg.__path__):
        try:
            module = importlib.import_module(f"pwsweep.sources.{modname}")
            found.extend(_find_sources_in_module(module))
        except Exception:
            log.exception("Failed to load built-in source module: %s", modname)
    return found


def load_sources(registry: SourceRegistry) -> None:
    """Discover and register all built-in sources."""
    for cls in _load_builtin_sources():
        try:
            registry.register(cls())
        except Exception:
            log.exception("Failed to instantiate source: %s", cls.__name__)

    log.info("Loaded %d sources", len(registry))
