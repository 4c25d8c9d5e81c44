"""Registry of the engines behind the pipeline stage subcommands.

The analyzer, scanner, advisor, evaluator, downloader, notifier and result
upload commands only handle options, result files and exit codes; the work
itself is done by an engine. Engines are registered in-process with
``register_engine`` or shipped by other distributions through the
``ort.engines`` entry point group.

Usage:
    @register_engine("analyzer")
    def analyze(input_dir, config, **options) -> OrtResult: ...

    engine = get_engine("analyzer")      # raises EngineNotFoundError
"""

import logging
from collections.abc import Callable
from importlib.metadata import entry_points
from typing import Any

from ort.utils import OrtError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "ort.engines"

ENGINE_NAMES = (
    "advisor",
    "analyzer",
    "downloader",
    "evaluator",
    "notifier",
    "scanner",
    "upload-result-to-postgres",
    "upload-result-to-sw360",
)

Engine = Callable[..., Any]

# Registry of engines
_engines: dict[str, Engine] = {}


class EngineNotFoundError(OrtError):
    """Raised when no engine is installed for a stage."""


def register_engine(name: str):
    """Decorator to register an engine for the stage *name*."""
    def decorator(func: Engine) -> Engine:
        _engines[name.lower()] = func
        return func
    return decorator


def _load_entry_point(name: str) -> Engine | None:
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name.lower() == name:
            logger.debug("Loading '%s' engine from entry point '%s'.", name, ep.value)
            return ep.load()
    return None


def find_engine(name: str) -> Engine | None:
    name = name.lower()
    if name in _engines:
        return _engines[name]

    engine = _load_entry_point(name)
    if engine is not None:
        _engines[name] = engine
    return engine


def get_engine(name: str) -> Engine:
    engine = find_engine(name)
    if engine is None:
        raise EngineNotFoundError(
            f"No '{name}' engine is installed. Install a package providing an "
            f"'{ENTRY_POINT_GROUP}' entry point named '{name}'."
        )
    return engine
