# aurfetch/modules/deplist.py
"""
deplist.py - ordered list of dependency names without repetitions.

- DepList keeps explicit head/tail references and a length counter.
- insert_unique() appends only tokens that are not present yet.
- remove_node() detaches a node and hands its data to a dispose callback.
- merge_sorted_dedup() merges two sorted lists into one sorted list,
  dropping duplicates (the left-hand element is always the one discarded).
"""

from __future__ import annotations
from functools import cmp_to_key
from typing import Any, Callable, Iterator, List, Optional

Compare = Callable[[Any, Any], int]
Dispose = Callable[[Any], None]


class DepNode:
    __slots__ = ("data", "next", "prev")

    def __init__(self, data: Any):
        self.data = data
        self.next: Optional[DepNode] = None
        self.prev: Optional[DepNode] = None

    def __repr__(self):
        return f"DepNode({self.data!r})"


class DepList:
    """Doubly linked list owning its nodes."""

    def __init__(self, items=None):
        self.head: Optional[DepNode] = None
        self.tail: Optional[DepNode] = None
        self.length = 0
        for item in items or ():
            self.append(item)

    def __len__(self):
        return self.length

    def __bool__(self):
        return self.head is not None

    def __iter__(self) -> Iterator[Any]:
        node = self.head
        while node is not None:
            yield node.data
            node = node.next

    def __contains__(self, item):
        return self.find(item) is not None

    def __eq__(self, other):
        if isinstance(other, DepList):
            return self.to_list() == other.to_list()
        return NotImplemented

    def __repr__(self):
        return f"DepList({self.to_list()!r})"

    def nodes(self) -> Iterator[DepNode]:
        node = self.head
        while node is not None:
            # grab next first so callers may remove the node they are given
            following = node.next
            yield node
            node = following

    def to_list(self) -> List[Any]:
        return list(self)

    def find(self, item) -> Optional[DepNode]:
        for node in self.nodes():
            if node.data == item:
                return node
        return None

    def append(self, data) -> DepNode:
        return self.append_node(DepNode(data))

    def append_node(self, node: DepNode) -> DepNode:
        node.next = None
        node.prev = self.tail
        if self.tail is None:
            self.head = node
        else:
            self.tail.next = node
        self.tail = node
        self.length += 1
        return node

    def pop_head_node(self) -> Optional[DepNode]:
        node = self.head
        if node is None:
            return None
        self.head = node.next
        if self.head is None:
            self.tail = None
        else:
            self.head.prev = None
        node.next = None
        node.prev = None
        self.length -= 1
        return node

    def remove_node(self, node: DepNode, dispose: Optional[Dispose] = None) -> Optional[DepNode]:
        """Detach ``node``, dispose of its data and return the node that followed it."""
        following = node.next
        if node.prev is None:
            self.head = following
        else:
            node.prev.next = following
        if following is None:
            self.tail = node.prev
        else:
            following.prev = node.prev
        node.next = None
        node.prev = None
        self.length -= 1

        if dispose is not None and node.data is not None:
            dispose(node.data)
        node.data = None
        return following

    def take_all(self, other: DepList) -> None:
        """Move every node of ``other`` to the end of this list; ``other`` ends up empty."""
        if other.head is None:
            return
        if self.tail is None:
            self.head = other.head
        else:
            self.tail.next = other.head
            other.head.prev = self.tail
        self.tail = other.tail
        self.length += other.length
        other.head = other.tail = None
        other.length = 0

    def sorted(self, compare: Compare) -> DepList:
        """New list with the same elements ordered by a three-way comparator."""
        return DepList(sorted(self, key=cmp_to_key(compare)))


def insert_unique(deps: Optional[DepList], token) -> DepList:
    """Append ``token`` unless an equal element is already in ``deps``."""
    if deps is None:
        deps = DepList()
    if deps.find(token) is None:
        deps.append(token)
    return deps


def remove_node(deps: DepList, node: DepNode, dispose: Optional[Dispose] = None) -> Optional[DepNode]:
    return deps.remove_node(node, dispose)


def strcmp(a: str, b: str) -> int:
    return (a > b) - (a < b)


def merge_sorted_dedup(left: Optional[DepList],
                       right: Optional[DepList],
                       compare: Compare = strcmp,
                       dispose: Optional[Dispose] = None) -> Optional[DepList]:
    """
    Merge two lists sorted under ``compare`` into one sorted list.

    Both inputs must be free of duplicates themselves. When the heads
    compare equal the left element is removed (and passed to ``dispose``)
    and the comparison is repeated, so only the right instance survives.
    Nodes are moved, not copied: both inputs are empty afterwards.
    """
    if not left:
        return right
    if not right:
        return left

    merged = DepList()
    while left.head is not None and right.head is not None:
        result = compare(left.head.data, right.head.data)
        if result < 0:
            merged.append_node(left.pop_head_node())
        elif result > 0:
            merged.append_node(right.pop_head_node())
        else:
            left.remove_node(left.head, dispose)

    merged.take_all(left)
    merged.take_all(right)
    return merged
