"""Id lookups over a built Node tree."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from ne_engine.models.node import Node


class NodeIndex:
    """Flat id -> node map with parent links, built in one walk."""

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}
        self._parents: Dict[str, Optional[str]] = {}
        self.root: Optional[Node] = None

    @classmethod
    def from_tree(cls, root: Optional[Node]) -> "NodeIndex":
        index = cls()
        if root is None:
            return index
        index.root = root
        stack: List[tuple[Node, Optional[str]]] = [(root, None)]
        while stack:
            node, parent_id = stack.pop()
            if node.id in index._nodes:
                continue
            index._nodes[node.id] = node
            index._parents[node.id] = parent_id
            stack.extend((child, node.id) for child in reversed(node.children))
        return index

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def parent_of(self, node_id: str) -> Optional[Node]:
        parent_id = self._parents.get(node_id)
        return self._nodes.get(parent_id) if parent_id is not None else None

    def ancestors(self, node_id: str) -> List[Node]:
        """Ancestors of ``node_id`` from its parent up to the root."""
        chain: List[Node] = []
        parent_id = self._parents.get(node_id)
        while parent_id is not None:
            chain.append(self._nodes[parent_id])
            parent_id = self._parents.get(parent_id)
        return chain

    def depth(self, node_id: str) -> int:
        if node_id not in self._nodes:
            raise KeyError(node_id)
        return len(self.ancestors(node_id))

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())
