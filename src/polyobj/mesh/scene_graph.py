"""Scene node hierarchy stored as an arena.

Nodes are addressed by their index in ``SceneGraph.nodes``; parents are
indices and children are index lists, so the graph owns every node directly.
Mesh nodes carry their local transform and group nodes their global one.
Transforms are kept for inspection only, exported positions are not
transformed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np


@dataclass
class SceneNode:
    name: str
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    mesh_indices: list[int] = field(default_factory=list)

    @property
    def has_meshes(self) -> bool:
        return bool(self.mesh_indices)


class SceneGraph:
    """Arena of :class:`SceneNode`; index 0 is the root once added."""

    def __init__(self):
        self.nodes: list[SceneNode] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> SceneNode:
        return self.nodes[index]

    @property
    def root(self) -> SceneNode:
        if not self.nodes:
            raise IndexError("Scene graph is empty")
        return self.nodes[0]

    def add_node(
        self,
        name: str,
        parent: Optional[int] = None,
        transform: np.ndarray | None = None,
    ) -> int:
        """Append a node and link it under ``parent``. Returns its index."""
        if parent is not None and not 0 <= parent < len(self.nodes):
            raise IndexError(f"Parent index {parent} out of range")
        node = SceneNode(
            name=name,
            parent=parent,
            transform=np.eye(4) if transform is None else np.asarray(transform, dtype=np.float64).reshape(4, 4),
        )
        self.nodes.append(node)
        index = len(self.nodes) - 1
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    def path(self, index: int) -> str:
        """Slash-separated node names from the root to ``index``."""
        names = []
        current: Optional[int] = index
        while current is not None:
            names.append(self.nodes[current].name)
            current = self.nodes[current].parent
        return "/".join(reversed(names))

    def walk(self) -> Iterator[tuple[int, int, SceneNode]]:
        """Depth-first ``(depth, index, node)`` from the root, children in order."""
        if not self.nodes:
            return
        stack = [(0, 0)]
        while stack:
            depth, index = stack.pop()
            node = self.nodes[index]
            yield depth, index, node
            for child in reversed(node.children):
                stack.append((depth + 1, child))

    def mesh_nodes(self) -> list[int]:
        return [i for i, node in enumerate(self.nodes) if node.has_meshes]


@dataclass
class ImportedScene:
    """Everything an importer hands to the converter."""

    name: str
    graph: SceneGraph
    meshes: list = field(default_factory=list)  # list[PolygonMesh], extraction order
    raw_materials: list = field(default_factory=list)  # list[RawMaterial], not deduplicated
