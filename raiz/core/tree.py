"""Recursive dependency tree expansion and the summary pass over its result."""
import logging
import time
from typing import Dict, Optional, Set, Tuple

from raiz.core.errors import RegistryLookupError, TraversalCancelled
from raiz.core.model import DependencyNode, NodeStatus
from raiz.core.registry import RegistryClient

DEFAULT_MAX_DEPTH = 5
MAX_DEPTH_CEILING = 10

Tree = Dict[str, DependencyNode]


class TreeBuilder:
    """
    Expands declared dependencies into a tree of DependencyNode.

    `path` holds the names on the current root-to-node path only. A name is
    added when its node is expanded and removed on the way back up, so a
    package shared by sibling branches is expanded in each of them while an
    ancestor link becomes a circular marker.
    """

    def __init__(self, client: RegistryClient, max_depth: int = DEFAULT_MAX_DEPTH,
                 deadline: Optional[float] = None) -> None:
        self.client = client
        self.max_depth = max_depth
        self.deadline = deadline
        self.fetches = 0

    def build(self, root_name: str, dependencies: Dict[str, str]) -> Tuple[Tree, int]:
        """Expands the root's direct dependencies. Returns the tree and its depth."""
        return self._expand_children(dependencies, {root_name}, 1)

    def expand(self, name: str, version_range: str, path: Set[str], depth: int) -> Tuple[DependencyNode, int]:
        if name in path:
            logging.debug(f"Cycle: {name} is already on the path")
            return DependencyNode.circular(name, version_range), depth

        if depth >= self.max_depth:
            return DependencyNode.depth_limited(name, version_range), depth

        self._check_deadline()

        path.add(name)
        try:
            try:
                self.fetches += 1
                metadata, version = self.client.fetch(name)
            except RegistryLookupError as e:
                logging.warning(f"Dependency {name}@{version_range} unresolved: {e}")
                return DependencyNode.failed(name, version_range, str(e)), depth

            node = DependencyNode.expanded(name, version_range, version)
            declared = metadata.versions[version].dependencies
            node.dependencies, deepest = self._expand_children(declared, path, depth + 1)
            return node, max(depth, deepest)
        finally:
            path.discard(name)

    def _expand_children(self, declared: Dict[str, str], path: Set[str], depth: int) -> Tuple[Tree, int]:
        children: Tree = {}
        deepest = 0
        for dep_name, dep_range in declared.items():
            child, child_depth = self.expand(dep_name, dep_range, path, depth)
            children[dep_name] = child
            deepest = max(deepest, child_depth)
        return children, deepest

    def _check_deadline(self) -> None:
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise TraversalCancelled(f"dependency traversal timed out after {self.fetches} lookups")


def count_unique(tree: Tree) -> int:
    """Counts distinct non-circular package names anywhere in the tree."""
    seen: Set[str] = set()

    def walk(nodes: Tree) -> None:
        for name, node in nodes.items():
            if node.status is NodeStatus.CIRCULAR:
                continue
            seen.add(name)
            walk(node.dependencies)

    walk(tree)
    return len(seen)


def summarize(tree: Tree, depth: int) -> Tuple[int, int]:
    return count_unique(tree), depth
