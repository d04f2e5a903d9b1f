"""Path parameter converters for route path segments like ``{slug:path}``."""

# Regex each converter matches against a single path segment.
# ``path`` is special-cased by the router: it consumes the rest of the path.
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "path": r".+",
}
