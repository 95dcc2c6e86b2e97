import logging
from typing import Callable, Optional, Tuple
from urllib.parse import quote

import httpx

from raiz.core.errors import NotFound, ParseError, RegistryError, TransportError
from raiz.core.model import PackageMetadata
from raiz.core.resolver import resolve_version

REGISTRY_URL = "https://registry.npmjs.org"
REQUEST_TIMEOUT = 30.0


def package_url(base_url: str, package_name: str) -> str:
    # Scoped names keep their "@" but the "/" must not split the path
    return f"{base_url.rstrip('/')}/{quote(package_name, safe='@')}"


class RegistryClient:
    """
    Fetches package documents from an npm-compatible registry.

    Each fetch is a single GET with no retries and no caching, so the same
    package requested twice costs two round-trips.
    """

    def __init__(
        self,
        base_url: str = REGISTRY_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        on_fetch: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.base_url = base_url
        self.on_fetch = on_fetch
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch(self, package_name: str, version: Optional[str] = None) -> Tuple[PackageMetadata, str]:
        url = package_url(self.base_url, package_name)

        if self.on_fetch:
            self.on_fetch(package_name)
        logging.debug(f"GET {url}")

        try:
            response = self._client.get(url)
        except httpx.RequestError as e:
            logging.warning(f"Request for {package_name} failed: {e}")
            raise TransportError(package_name, str(e) or type(e).__name__) from e

        if response.status_code == 404:
            raise NotFound(package_name)
        if response.status_code != 200:
            logging.error(f"Registry error {response.status_code} for {package_name}")
            raise RegistryError(package_name, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(package_name, str(e)) from e

        if not isinstance(data, dict):
            raise ParseError(package_name, f"expected a JSON object, got {type(data).__name__}")

        metadata = PackageMetadata.from_json(data)
        resolved = resolve_version(metadata, version, package_name=package_name)
        return metadata, resolved
