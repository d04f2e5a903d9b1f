"""Composition — from classified artifacts to a frozen route table.

For each page the directories from the root down to the page are
walked once, collecting:

- middleware, in order, outermost first
- layouts, outermost first; ``skip_inherited_layouts`` drops the ones
  collected so far
- the nearest ``_app``; ``skip_app_wrapper`` removes it until a deeper
  ``_app`` appears
- the nearest ``_error``
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from wren.errors import ConfigurationError
from wren.routes.methods import MethodBinding, bind_methods
from wren.routes.sort import route_sort_key
from wren.routes.tree import RouteTree
from wren.routes.types import ArtifactKind, ArtifactRecord, ComposedChain
from wren.routing.route import ANY_METHOD, Route

logger = logging.getLogger("wren.routes")

_PARAM = re.compile(r"\{\w+(:path)?\}")


def compose_chain(tree: RouteTree, page: ArtifactRecord) -> ComposedChain:
    """Resolve the inherited middleware, layouts, shell and boundary of *page*."""
    middlewares: list[object] = []
    layouts: list[ArtifactRecord] = []
    app_shell: ArtifactRecord | None = None
    error_boundary: ArtifactRecord | None = None

    for node in tree.path_to(page.directory):
        middleware = tree.record(node.middleware)
        if middleware is not None:
            middlewares.extend(middleware.middlewares)

        shell = tree.record(node.app_shell)
        if shell is not None:
            app_shell = shell

        layout = tree.record(node.layout)
        if layout is not None:
            if layout.config.skip_inherited_layouts:
                layouts.clear()
            layouts.append(layout)
            if layout.config.skip_app_wrapper:
                app_shell = None

        boundary = tree.record(node.error_boundary)
        if boundary is not None:
            error_boundary = boundary

    if page.config.skip_inherited_layouts:
        layouts.clear()
    if page.config.skip_app_wrapper:
        app_shell = None

    return ComposedChain(
        pattern=page.url_pattern,
        source=page.source,
        middlewares=tuple(middlewares),
        layouts=tuple(layouts),
        app_shell=app_shell,
        error_boundary=error_boundary,
        page_component=page.component,
        bindings=bind_methods(page.source, page.handlers, page.component),
    )


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One ``(pattern, method)`` the table serves."""

    pattern: str
    method: str
    chain: ComposedChain
    binding: MethodBinding

    def to_route(self) -> Route:
        return Route(
            path=self.pattern,
            method=self.method,
            chain=self.chain,
            handler=self.binding.handler,
            strip_body=self.binding.strip_body,
        )


@dataclass(frozen=True, slots=True)
class RouteTable:
    """The frozen routing table: entries in route order."""

    entries: tuple[RouteEntry, ...] = ()

    @property
    def chains(self) -> tuple[ComposedChain, ...]:
        """One chain per page, in route order."""
        seen: dict[str, ComposedChain] = {}
        for entry in self.entries:
            seen.setdefault(entry.chain.source, entry.chain)
        return tuple(seen.values())

    def routes(self) -> list[Route]:
        """Router-ready ``Route`` objects, in route order."""
        return [entry.to_route() for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


def _shape(pattern: str) -> str:
    """Pattern with parameter names erased: ``/a/{id}`` -> ``/a/{}``."""
    return _PARAM.sub(lambda m: "{*}" if m.group(1) else "{}", pattern)


def build_route_table(records: Iterable[ArtifactRecord]) -> RouteTable:
    """Compose every page of *records* into a ``RouteTable``.

    Raises:
        ConfigurationError: Two special artifacts share a directory, or
            two pages answer the same method on the same URL.
    """
    ordered = sorted(records, key=lambda record: route_sort_key(record.source))
    tree = RouteTree.build(ordered)

    entries: list[RouteEntry] = []
    bound: dict[str, dict[str, str]] = {}
    patterns: dict[str, str] = {}

    for record in ordered:
        if record.kind is not ArtifactKind.PAGE:
            continue
        chain = compose_chain(tree, record)
        shape = _shape(chain.pattern)
        known = patterns.setdefault(shape, chain.pattern)
        if known != chain.pattern:
            msg = (
                f"Route {record.source!r} serves {chain.pattern} which is ambiguous "
                f"with {known}: parameter names differ at the same position"
            )
            raise ConfigurationError(msg)
        methods = bound.setdefault(shape, {})

        for binding in chain.bindings:
            clash = methods.get(binding.method)
            if clash is None and methods and ANY_METHOD in {binding.method, *methods}:
                clash = next(iter(methods.values()))
            if clash is not None and clash != record.source:
                msg = (
                    f"Route conflict: {record.source!r} and {clash!r} both answer "
                    f"{binding.method} {chain.pattern}"
                )
                raise ConfigurationError(msg)
            methods[binding.method] = record.source
            entries.append(RouteEntry(chain.pattern, binding.method, chain, binding))

        logger.debug(
            "Composed %s -> %s [%s]",
            chain.pattern,
            record.source,
            ", ".join(binding.method for binding in chain.bindings),
        )

    return RouteTable(entries=tuple(entries))
