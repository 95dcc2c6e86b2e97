from typing import Optional

from raiz.core.errors import NoLatestVersion, VersionNotFound
from raiz.core.model import PackageMetadata


def resolve_version(metadata: PackageMetadata, requested: Optional[str] = None,
                    package_name: Optional[str] = None) -> str:
    """
    Returns the key into metadata.versions to analyze.

    An explicit version wins; otherwise the "latest" dist-tag is used. Version
    ranges are never matched here, dependencies always come in without one.
    """
    name = package_name or metadata.name

    version = requested
    if not version:
        version = metadata.latest
        if not version:
            raise NoLatestVersion(name)

    if version not in metadata.versions:
        raise VersionNotFound(name, version)

    return version
