"""
The two npm tools: a recursive dependency tree and a flat single-version
analysis. Both return plain dicts ready for JSON.
"""
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from raiz.core.errors import InputError
from raiz.core.extract import extract_author, extract_license, extract_repository
from raiz.core.model import PackageMetadata
from raiz.core.registry import RegistryClient
from raiz.core.tree import DEFAULT_MAX_DEPTH, MAX_DEPTH_CEILING, Tree, TreeBuilder, summarize


def clamp_max_depth(value: Optional[int]) -> int:
    if value is None or value <= 0:
        return DEFAULT_MAX_DEPTH
    return min(value, MAX_DEPTH_CEILING)


def _require_name(package_name: Optional[str]) -> str:
    if not package_name or not package_name.strip():
        raise InputError("package_name is required")
    return package_name.strip()


@contextmanager
def _registry(client: Optional[RegistryClient]) -> Iterator[RegistryClient]:
    if client is not None:
        yield client
        return
    with RegistryClient() as own:
        yield own


def _common_fields(metadata: PackageMetadata, version: str) -> Dict[str, Any]:
    details = metadata.versions[version]
    return {
        "name": metadata.name,
        "version": version,
        "description": details.description or metadata.description,
        "license": extract_license(metadata.license),
        "homepage": metadata.homepage,
        "repository": extract_repository(metadata.repository),
        "author": extract_author(metadata.author),
        "keywords": list(metadata.keywords),
        "latest_version": metadata.latest,
        "publish_time": metadata.time.get(version, ""),
    }


@dataclass
class TreeResult:
    metadata: PackageMetadata
    version: str
    tree: Tree
    total_dependencies: int
    tree_depth: int
    lookups: int = 0

    def to_dict(self) -> Dict[str, Any]:
        result = _common_fields(self.metadata, self.version)
        result.update({
            "dependency_tree": {name: node.to_dict() for name, node in self.tree.items()},
            "total_dependencies": self.total_dependencies,
            "tree_depth": self.tree_depth,
        })
        return result


def resolve_tree(
    package_name: str,
    version: Optional[str] = None,
    max_depth: Optional[int] = None,
    *,
    client: Optional[RegistryClient] = None,
    timeout: Optional[float] = None,
) -> TreeResult:
    """
    Resolve the dependency tree of an npm package.

    Failures on the root package raise. Failures on transitive dependencies are
    recorded on their node and the rest of the tree is still built.

    Args:
        package_name: npm package name, scoped names included ("@types/node").
        version: Exact version of the root package; "latest" when omitted.
        max_depth: Depth ceiling, 5 when omitted or not positive, at most 10.
        client: Registry client to reuse; a private one is opened otherwise.
        timeout: Seconds allowed for the whole traversal.
    """
    name = _require_name(package_name)
    depth_ceiling = clamp_max_depth(max_depth)
    deadline = time.monotonic() + timeout if timeout else None

    logging.info(f"Resolving tree for {name} (version={version or 'latest'}, max_depth={depth_ceiling})")

    with _registry(client) as registry:
        metadata, resolved = registry.fetch(name, version)
        builder = TreeBuilder(registry, max_depth=depth_ceiling, deadline=deadline)
        tree, depth = builder.build(name, metadata.versions[resolved].dependencies)

    total, depth = summarize(tree, depth)
    logging.info(f"{name}@{resolved}: {total} unique dependencies, depth {depth}, {builder.fetches} lookups")

    return TreeResult(metadata, resolved, tree, total, depth, lookups=builder.fetches + 1)


def get_npm_dependencies_tree(
    package_name: str,
    version: Optional[str] = None,
    max_depth: Optional[int] = None,
    *,
    client: Optional[RegistryClient] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Same as resolve_tree, serialized to a JSON-ready dict."""
    return resolve_tree(package_name, version, max_depth, client=client, timeout=timeout).to_dict()


def analyze_npm_package(
    package_name: str,
    version: Optional[str] = None,
    *,
    client: Optional[RegistryClient] = None,
) -> Dict[str, Any]:
    """Describe one version of an npm package and its declared dependencies, without recursion."""
    name = _require_name(package_name)

    with _registry(client) as registry:
        metadata, resolved = registry.fetch(name, version)

    details = metadata.versions[resolved]
    result = _common_fields(metadata, resolved)
    result.update({
        "dependencies": dict(details.dependencies),
        "dev_dependencies": dict(details.dev_dependencies),
        "peer_dependencies": dict(details.peer_dependencies),
        "dependency_count": len(details.dependencies),
    })
    return result
