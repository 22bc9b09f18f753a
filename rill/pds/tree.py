"""
rill.pds.tree - Persistent AVL tree shared by PMap and PSet

Nodes are immutable. Every update returns a new root that shares all
untouched subtrees with the old one, so an Enum created from an old root
keeps traversing the old version no matter what happens afterwards.

Each node stores its height (for balancing) and its subtree size, which
makes len() O(1) and lets TreeCursor skip whole subtrees in fast_forward.
"""

from typing import Any, Callable, Optional

from rill.core import Cursor
from rill.types import EXHAUSTED


def natural_compare(a: Any, b: Any) -> int:
    """Three-way comparison using the natural ordering of the values."""
    return (a > b) - (a < b)


class Node:
    """An immutable tree node."""

    __slots__ = ("key", "value", "left", "right", "height", "size")

    def __init__(self, key: Any, value: Any, left: Optional["Node"], right: Optional["Node"]):
        self.key = key
        self.value = value
        self.left = left
        self.right = right
        self.height = 1 + max(height(left), height(right))
        self.size = 1 + size(left) + size(right)


def height(node: Optional[Node]) -> int:
    return node.height if node is not None else 0


def size(node: Optional[Node]) -> int:
    return node.size if node is not None else 0


def _balance(key, value, left, right) -> Node:
    hl = height(left)
    hr = height(right)
    if hl > hr + 1:
        if height(left.left) >= height(left.right):
            return Node(left.key, left.value, left.left, Node(key, value, left.right, right))
        lr = left.right
        return Node(
            lr.key,
            lr.value,
            Node(left.key, left.value, left.left, lr.left),
            Node(key, value, lr.right, right),
        )
    if hr > hl + 1:
        if height(right.right) >= height(right.left):
            return Node(right.key, right.value, Node(key, value, left, right.left), right.right)
        rl = right.left
        return Node(
            rl.key,
            rl.value,
            Node(key, value, left, rl.left),
            Node(right.key, right.value, rl.right, right.right),
        )
    return Node(key, value, left, right)


def add(node: Optional[Node], key: Any, value: Any, cmp: Callable) -> Node:
    """Return a tree with key bound to value, replacing any previous binding."""
    if node is None:
        return Node(key, value, None, None)
    c = cmp(key, node.key)
    if c == 0:
        return Node(key, value, node.left, node.right)
    if c < 0:
        return _balance(node.key, node.value, add(node.left, key, value, cmp), node.right)
    return _balance(node.key, node.value, node.left, add(node.right, key, value, cmp))


def find(node: Optional[Node], key: Any, cmp: Callable) -> Optional[Node]:
    """Return the node holding key, or None."""
    while node is not None:
        c = cmp(key, node.key)
        if c == 0:
            return node
        node = node.left if c < 0 else node.right
    return None


def _remove_min(node: Node) -> Optional[Node]:
    if node.left is None:
        return node.right
    return _balance(node.key, node.value, _remove_min(node.left), node.right)


def _merge(left: Optional[Node], right: Optional[Node]) -> Optional[Node]:
    if left is None:
        return right
    if right is None:
        return left
    m = right
    while m.left is not None:
        m = m.left
    return _balance(m.key, m.value, left, _remove_min(right))


def remove(node: Optional[Node], key: Any, cmp: Callable) -> Optional[Node]:
    """Return a tree without key. Missing keys leave the tree unchanged."""
    if node is None:
        return None
    c = cmp(key, node.key)
    if c == 0:
        return _merge(node.left, node.right)
    if c < 0:
        left = remove(node.left, key, cmp)
        if left is node.left:
            return node
        return _balance(node.key, node.value, left, node.right)
    right = remove(node.right, key, cmp)
    if right is node.right:
        return node
    return _balance(node.key, node.value, node.left, right)


def walk(node: Optional[Node], f: Callable[[Node], Any]) -> None:
    """Call f on every node in key order."""
    while node is not None:
        walk(node.left, f)
        f(node)
        node = node.right


def map_values(node: Optional[Node], f: Callable[[Any, Any], Any]) -> Optional[Node]:
    """Return a tree with the same shape and f(key, value) as values."""
    if node is None:
        return None
    left = map_values(node.left, f)
    value = f(node.key, node.value)
    right = map_values(node.right, f)
    return Node(node.key, value, left, right)


def min_node(node: Optional[Node]) -> Optional[Node]:
    if node is None:
        return None
    while node.left is not None:
        node = node.left
    return node


def max_node(node: Optional[Node]) -> Optional[Node]:
    if node is None:
        return None
    while node.right is not None:
        node = node.right
    return node


class TreeCursor(Cursor):
    """
    In-order cursor over an immutable tree.

    The stack holds the nodes still to be produced, each with its near
    subtree already done. Clone copies the stack (O(log n)); fast_forward
    skips whole subtrees using their sizes.
    """

    __slots__ = ("_stack", "_reverse", "_project")

    def __init__(
        self,
        root: Optional[Node],
        project: Callable[[Node], Any],
        reverse: bool = False,
        stack: Optional[list] = None,
    ):
        self._project = project
        self._reverse = reverse
        if stack is None:
            self._stack = []
            self._descend(root, 0)
        else:
            self._stack = stack

    def _descend(self, node: Optional[Node], n: int) -> int:
        # Push the path to the n-th element of node's subtree; returns what
        # is left of n when the whole subtree is skipped
        stack = self._stack
        reverse = self._reverse
        while node is not None:
            near = node.right if reverse else node.left
            far = node.left if reverse else node.right
            near_size = size(near)
            if n < near_size:
                stack.append(node)
                node = near
            elif n == near_size:
                stack.append(node)
                return 0
            else:
                n -= near_size + 1
                node = far
        return n

    def next(self):
        stack = self._stack
        if not stack:
            return EXHAUSTED
        node = stack.pop()
        self._descend(node.left if self._reverse else node.right, 0)
        return self._project(node)

    def count(self) -> int:
        reverse = self._reverse
        return sum(1 + size(n.left if reverse else n.right) for n in self._stack)

    def clone(self) -> "TreeCursor":
        return TreeCursor(None, self._project, self._reverse, list(self._stack))

    def fast_forward(self, n: int) -> int:
        stack = self._stack
        remaining = n
        while remaining > 0 and stack:
            node = stack.pop()
            remaining -= 1
            far = node.left if self._reverse else node.right
            remaining = self._descend(far, remaining)
        return n - remaining


__all__ = [
    "Node",
    "TreeCursor",
    "natural_compare",
    "add",
    "find",
    "remove",
    "walk",
    "map_values",
    "min_node",
    "max_node",
    "height",
    "size",
]
