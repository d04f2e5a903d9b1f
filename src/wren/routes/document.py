"""HTML document framing for rendered pages."""

import html
import re

DOCTYPE = "<!DOCTYPE html>"

_DOCTYPE_RE = re.compile(r"^\s*<!doctype\s", re.IGNORECASE)


def render_document(
    body: str,
    head: tuple[str, ...] = (),
    *,
    lang: str | None = None,
    charset: str = "utf-8",
) -> str:
    """Wrap *body* in the default document shell.

    Used for pages rendered without an ``_app``::

        >>> render_document("<h1>hi</h1>")
        '<!DOCTYPE html><html><head><meta charset="utf-8"></head><body><h1>hi</h1></body></html>'
    """
    html_open = f'<html lang="{html.escape(lang)}">' if lang else "<html>"
    return (
        f"{DOCTYPE}{html_open}<head>"
        f'<meta charset="{html.escape(charset)}">{"".join(head)}'
        f"</head><body>{body}</body></html>"
    )


def wrap_app(markup: str) -> str:
    """Prefix app-shell output with a doctype unless it has one."""
    if _DOCTYPE_RE.match(markup):
        return markup
    return DOCTYPE + markup
