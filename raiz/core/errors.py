class RaizError(Exception):
    """Base class for every error raised by raiz."""


class InputError(RaizError):
    pass


class RegistryLookupError(RaizError):
    """A registry lookup for one package failed."""

    def __init__(self, package_name: str, message: str) -> None:
        super().__init__(message)
        self.package_name = package_name


class NotFound(RegistryLookupError):
    def __init__(self, package_name: str) -> None:
        super().__init__(package_name, f"package '{package_name}' not found in npm registry")


class RegistryError(RegistryLookupError):
    def __init__(self, package_name: str, status_code: int) -> None:
        super().__init__(package_name, f"npm registry returned status code {status_code}")
        self.status_code = status_code


class TransportError(RegistryLookupError):
    def __init__(self, package_name: str, reason: str) -> None:
        super().__init__(package_name, f"failed to fetch package information: {reason}")


class ParseError(RegistryLookupError):
    def __init__(self, package_name: str, reason: str) -> None:
        super().__init__(package_name, f"failed to parse npm registry response: {reason}")


class NoLatestVersion(RegistryLookupError):
    def __init__(self, package_name: str) -> None:
        super().__init__(package_name, f"no latest version found for package '{package_name}'")


class VersionNotFound(RegistryLookupError):
    def __init__(self, package_name: str, version: str) -> None:
        super().__init__(package_name, f"version '{version}' not found for package '{package_name}'")
        self.version = version


class TraversalCancelled(RaizError):
    pass
