"""Directory arena for composition.

Every directory of the route tree becomes a ``DirectoryNode`` stored in
one flat list; nodes refer to children and artifacts by index. Built
once per ``build_route_table`` call and discarded afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from wren.errors import ConfigurationError
from wren.routes.types import ArtifactKind, ArtifactRecord

_SPECIAL_SLOTS = {
    ArtifactKind.MIDDLEWARE: "middleware",
    ArtifactKind.LAYOUT: "layout",
    ArtifactKind.APP_SHELL: "app_shell",
    ArtifactKind.ERROR_BOUNDARY: "error_boundary",
}


@dataclass(slots=True)
class DirectoryNode:
    """One directory: child directories plus its special artifacts.

    All ``int`` fields index into ``RouteTree.records``.
    """

    segment: str
    children: dict[str, int] = field(default_factory=dict)
    middleware: int | None = None
    layout: int | None = None
    app_shell: int | None = None
    error_boundary: int | None = None
    pages: list[int] = field(default_factory=list)


class RouteTree:
    """Arena of directory nodes rooted at index 0."""

    __slots__ = ("nodes", "records")

    def __init__(self) -> None:
        self.nodes: list[DirectoryNode] = [DirectoryNode(segment="")]
        self.records: list[ArtifactRecord] = []

    def node_for(self, directory: tuple[str, ...]) -> int:
        """Index of the node for *directory*, creating nodes as needed."""
        index = 0
        for segment in directory:
            child = self.nodes[index].children.get(segment)
            if child is None:
                child = len(self.nodes)
                self.nodes.append(DirectoryNode(segment=segment))
                self.nodes[index].children[segment] = child
            index = child
        return index

    def path_to(self, directory: tuple[str, ...]) -> list[DirectoryNode]:
        """Nodes from the root down to *directory*, root first."""
        nodes = [self.nodes[0]]
        index = 0
        for segment in directory:
            index = self.nodes[index].children[segment]
            nodes.append(self.nodes[index])
        return nodes

    def insert(self, record: ArtifactRecord) -> None:
        """Attach *record* to the node of its directory."""
        position = len(self.records)
        self.records.append(record)
        node = self.nodes[self.node_for(record.directory)]

        if record.kind is ArtifactKind.PAGE:
            node.pages.append(position)
            return

        slot = _SPECIAL_SLOTS[record.kind]
        existing = getattr(node, slot)
        if existing is not None:
            msg = (
                f"Directory {'/'.join(record.directory) or '/'!r} has two "
                f"{record.kind.value} files: {self.records[existing].source!r} "
                f"and {record.source!r}"
            )
            raise ConfigurationError(msg)
        setattr(node, slot, position)

    @classmethod
    def build(cls, records: Iterable[ArtifactRecord]) -> RouteTree:
        """Arena holding every record, specials attached to their directory."""
        tree = cls()
        for record in records:
            tree.insert(record)
        return tree

    def record(self, index: int | None) -> ArtifactRecord | None:
        return None if index is None else self.records[index]
