"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, routes_dir="site/routes")
    """

    debug: bool = False

    # Routes directory used by ``App.mount_routes()`` when no source is given
    routes_dir: str | Path = "routes"

    # Default document shell (pages rendered without an ``_app``)
    document_lang: str | None = None
    charset: str = "utf-8"
