"""Caret selection stored as a (node id, character offset) pair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models.nodes import Node


@dataclass(frozen=True, slots=True)
class Selection:
    """
    Caret anchor.

    The anchor refers to a node by its stable id, so moving the node to
    another page leaves the selection valid.
    """

    node_id: str
    offset: int = 0

    @classmethod
    def at(cls, node: Node, offset: int = 0) -> "Selection":
        return cls(node.node_id, offset)

    def within(self, node: Node) -> bool:
        """True when the anchor lies inside ``node`` (or is ``node`` itself)."""
        return node.contains(self.node_id)


def clamp_offset(node: Optional[Node], offset: int) -> int:
    """Clamp ``offset`` to the text length of ``node``."""
    if node is None:
        return 0
    return max(0, min(offset, len(node.text_content())))
