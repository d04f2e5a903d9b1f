"""Artifact classification.

Decides what role a route file plays from its name and validates its
exports against that role. Runs once per artifact at setup time; any
problem found here aborts startup.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

from wren.errors import ConfigurationError, MalformedArtifact
from wren.routes.methods import normalize_method_map
from wren.routes.paths import split_name
from wren.routes.types import ArtifactKind, RouteConfig

RESERVED_STEMS: dict[str, ArtifactKind] = {
    "_middleware": ArtifactKind.MIDDLEWARE,
    "_layout": ArtifactKind.LAYOUT,
    "_app": ArtifactKind.APP_SHELL,
    "_error": ArtifactKind.ERROR_BOUNDARY,
}

RECOGNIZED_EXPORTS = ("handler", "handlers", "default", "config")

# Source extensions filesystem discovery imports
ROUTE_EXTENSIONS = (".py",)

_CONFIG_KEYS = {
    "skipAppWrapper": "skip_app_wrapper",
    "skip_app_wrapper": "skip_app_wrapper",
    "skipInheritedLayouts": "skip_inherited_layouts",
    "skip_inherited_layouts": "skip_inherited_layouts",
}


@dataclass(frozen=True, slots=True)
class Classification:
    """The validated exports of one artifact."""

    kind: ArtifactKind
    handlers: Any = None
    component: Any = None
    config: RouteConfig = RouteConfig()


def exports_of(module: Any) -> dict[str, Any]:
    """Collect the recognized exports of a module or mapping."""
    if isinstance(module, Mapping):
        return {name: module[name] for name in RECOGNIZED_EXPORTS if name in module}
    return {
        name: getattr(module, name)
        for name in RECOGNIZED_EXPORTS
        if hasattr(module, name)
    }


def is_excluded(path: str) -> bool:
    """Whether *path* (or one of its directories) is left out of routing.

    Excluded: names starting with ``_`` other than the reserved stems,
    ``(_name)`` route-group directories, and hidden ``.`` entries.
    """
    parts = PurePosixPath(path).parts
    for index, part in enumerate(parts):
        if part.startswith("."):
            return True
        if part.startswith("(_") and part.endswith(")"):
            return True
        if part.startswith("_"):
            is_leaf = index == len(parts) - 1
            if not is_leaf or split_name(part)[0] not in RESERVED_STEMS:
                return True
    return False


def artifact_kind(path: str) -> ArtifactKind:
    """Role of the artifact at *path*, derived from its file stem."""
    stem, _ = split_name(PurePosixPath(path).name)
    return RESERVED_STEMS.get(stem, ArtifactKind.PAGE)


def parse_config(path: str, value: Any) -> RouteConfig:
    """Normalize a ``config`` export into a ``RouteConfig``.

    Accepts a ``RouteConfig`` or a mapping with camelCase or snake_case
    keys::

        config = {"skipAppWrapper": True}
        config = RouteConfig(skip_inherited_layouts=True)
    """
    if value is None:
        return RouteConfig()
    if isinstance(value, RouteConfig):
        return value
    if not isinstance(value, Mapping):
        msg = (
            f"Route file {path!r} exports config of type {type(value).__name__}. "
            "Expected a RouteConfig or a mapping."
        )
        raise ConfigurationError(msg)

    flags: dict[str, bool] = {}
    for key, flag in value.items():
        field_name = _CONFIG_KEYS.get(key)
        if field_name is None:
            msg = (
                f"Route file {path!r} has unknown config key {key!r}. "
                "Known keys: skipAppWrapper, skipInheritedLayouts."
            )
            raise ConfigurationError(msg)
        flags[field_name] = bool(flag)
    return RouteConfig(**flags)


def _is_middleware(value: Any) -> bool:
    if callable(value):
        return True
    if isinstance(value, Sequence) and not isinstance(value, str | bytes):
        return len(value) > 0 and all(callable(item) for item in value)
    return False


def _is_handler(value: Any) -> bool:
    if callable(value):
        return True
    return isinstance(value, Mapping) and all(callable(fn) for fn in value.values())


def classify_artifact(
    path: str,
    exports: Any,
    *,
    kind: ArtifactKind | None = None,
) -> Classification:
    """Classify the artifact at *path* and validate its exports.

    Args:
        path: Source path relative to the routes root.
        exports: Mapping of exported names, or a module.
        kind: Explicit kind tag. Must agree with the filename.

    Raises:
        MalformedArtifact: No recognized export is present.
        ConfigurationError: The exports do not fit the artifact's role.
    """
    found = exports_of(exports)
    if not found:
        raise MalformedArtifact(path)

    derived = artifact_kind(path)
    if kind is not None and kind is not derived:
        msg = (
            f"Route file {path!r} is registered as {kind.value} "
            f"but its name makes it a {derived.value}"
        )
        raise ConfigurationError(msg)

    handlers = found.get("handlers", found.get("handler"))
    component = found.get("default")
    config_value = found.get("config")

    if config_value is not None and derived not in (ArtifactKind.PAGE, ArtifactKind.LAYOUT):
        msg = f"Route file {path!r}: config is only supported on pages and layouts"
        raise ConfigurationError(msg)

    match derived:
        case ArtifactKind.MIDDLEWARE:
            if not _is_middleware(handlers):
                msg = (
                    f"Middleware {path!r} must export handler as a callable "
                    "or a non-empty sequence of callables"
                )
                raise ConfigurationError(msg)
        case ArtifactKind.LAYOUT | ArtifactKind.APP_SHELL:
            if not callable(component):
                msg = f"{derived.value.capitalize()} {path!r} must export a callable default"
                raise ConfigurationError(msg)
        case ArtifactKind.ERROR_BOUNDARY | ArtifactKind.PAGE:
            if handlers is None and component is None:
                msg = f"Route file {path!r} must export handler(s) or default"
                raise ConfigurationError(msg)
            if handlers is not None and not _is_handler(handlers):
                msg = (
                    f"Route file {path!r} exports handlers of type "
                    f"{type(handlers).__name__}. Expected a callable or a "
                    "mapping of HTTP methods to callables."
                )
                raise ConfigurationError(msg)
            if component is not None and not callable(component):
                msg = f"Route file {path!r} must export a callable default"
                raise ConfigurationError(msg)
            if derived is ArtifactKind.ERROR_BOUNDARY and isinstance(handlers, Mapping):
                handlers = normalize_method_map(path, handlers)

    return Classification(
        kind=derived,
        handlers=handlers,
        component=component,
        config=parse_config(path, config_value),
    )
