"""Filesystem route discovery.

Walks a routes directory and imports every ``.py`` artifact into a
``RouteManifest``. Excluded entries (``_private`` names, ``(_group)``
directories, hidden files) are skipped without being imported.

Modules are loaded with ``importlib`` straight from their file and are
not added to ``sys.modules``; route files import the rest of the
application normally.
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from types import ModuleType

from wren.errors import ConfigurationError
from wren.routes.classify import ROUTE_EXTENSIONS, is_excluded
from wren.routes.manifest import RouteManifest

logger = logging.getLogger("wren.routes")


def discover_routes(routes_dir: str | Path) -> RouteManifest:
    """Walk *routes_dir* and classify every route file.

    Args:
        routes_dir: Root of the route tree.

    Returns:
        A manifest of every discovered artifact.

    Raises:
        FileNotFoundError: *routes_dir* does not exist.
        ConfigurationError: A route file failed to import or classify.
    """
    root = Path(routes_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Routes directory not found: {root}")

    manifest = RouteManifest()
    _walk_directory(root, root, manifest)
    return manifest


def _walk_directory(directory: Path, root: Path, manifest: RouteManifest) -> None:
    for entry in sorted(directory.iterdir()):
        relative = entry.relative_to(root).as_posix()
        if is_excluded(relative):
            logger.debug("Skipping excluded route entry %s", relative)
            continue
        if entry.is_dir():
            _walk_directory(entry, root, manifest)
        elif entry.suffix in ROUTE_EXTENSIONS:
            module = _load_module(entry, relative)
            record = manifest.add(relative, module)
            if record is not None:
                logger.debug(
                    "Discovered %s %s -> %s", record.kind.value, relative, record.url_pattern
                )


def _load_module(file: Path, relative: str) -> ModuleType:
    """Import a route file without registering it in ``sys.modules``."""
    module_name = f"_wren_route_{relative.replace('/', '_').replace('.', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, file)
    if spec is None or spec.loader is None:
        msg = f"Cannot load route file {relative!r}"
        raise ConfigurationError(msg)
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"Failed to import route file {relative!r}: {exc}"
        raise ConfigurationError(msg) from exc
    return module
