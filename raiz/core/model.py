from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NodeStatus(Enum):
    EXPANDED = "expanded"
    CIRCULAR = "circular"
    DEPTH_LIMITED = "depth_limited"
    ERROR = "error"


def _str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


@dataclass(frozen=True)
class VersionDetails:
    version: str
    description: str = ""
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    peer_dependencies: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, version: str, data: Any) -> "VersionDetails":
        if not isinstance(data, dict):
            data = {}
        return cls(
            version=str(data.get("version") or version),
            description=data.get("description") or "",
            dependencies=_str_map(data.get("dependencies")),
            dev_dependencies=_str_map(data.get("devDependencies")),
            peer_dependencies=_str_map(data.get("peerDependencies")),
        )


@dataclass(frozen=True)
class PackageMetadata:
    """Registry document for one package, as returned by a single lookup."""

    name: str
    description: str = ""
    versions: Dict[str, VersionDetails] = field(default_factory=dict)
    dist_tags: Dict[str, str] = field(default_factory=dict)
    time: Dict[str, str] = field(default_factory=dict)

    # Raw shapes vary (string or object), see raiz.core.extract
    license: Any = None
    homepage: str = ""
    repository: Any = None
    author: Any = None
    keywords: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PackageMetadata":
        versions = data.get("versions") or {}
        if not isinstance(versions, dict):
            versions = {}

        keywords = data.get("keywords") or []
        if not isinstance(keywords, list):
            keywords = []

        homepage = data.get("homepage") or ""

        return cls(
            name=data.get("name") or "",
            description=data.get("description") or "",
            versions={v: VersionDetails.from_json(v, d) for v, d in versions.items()},
            dist_tags=_str_map(data.get("dist-tags")),
            time=_str_map(data.get("time")),
            license=data.get("license"),
            homepage=homepage if isinstance(homepage, str) else "",
            repository=data.get("repository"),
            author=data.get("author"),
            keywords=[str(k) for k in keywords],
        )

    @property
    def latest(self) -> str:
        return self.dist_tags.get("latest", "")


@dataclass
class DependencyNode:
    """
    One position in the dependency tree.

    The status is a single tag, so a node is either expanded (and owns its
    children) or one of the terminal markers: circular, depth-limited or error.
    """

    name: str
    version_range: str
    version: str = ""
    status: NodeStatus = NodeStatus.EXPANDED
    error: str = ""
    dependencies: Dict[str, "DependencyNode"] = field(default_factory=dict)

    @classmethod
    def expanded(cls, name: str, version_range: str, version: str) -> "DependencyNode":
        return cls(name, version_range, version=version)

    @classmethod
    def circular(cls, name: str, version_range: str) -> "DependencyNode":
        return cls(name, version_range, status=NodeStatus.CIRCULAR)

    @classmethod
    def depth_limited(cls, name: str, version_range: str) -> "DependencyNode":
        return cls(name, version_range, status=NodeStatus.DEPTH_LIMITED)

    @classmethod
    def failed(cls, name: str, version_range: str, message: str) -> "DependencyNode":
        return cls(name, version_range, status=NodeStatus.ERROR, error=message)

    @property
    def is_circular(self) -> bool:
        return self.status is NodeStatus.CIRCULAR

    @property
    def is_depth_limited(self) -> bool:
        return self.status is NodeStatus.DEPTH_LIMITED

    @property
    def has_error(self) -> bool:
        return self.status is NodeStatus.ERROR

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "version_range": self.version_range,
            "version": self.version,
        }
        if self.status is NodeStatus.EXPANDED:
            data["dependencies"] = {name: child.to_dict() for name, child in self.dependencies.items()}
        elif self.status is NodeStatus.CIRCULAR:
            data["circular"] = True
        elif self.status is NodeStatus.DEPTH_LIMITED:
            data["depth_limited"] = True
        else:
            data["error"] = self.error
        return data
