from __future__ import annotations

from datetime import datetime
from typing import Sequence

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.models import Package, Vulnerability
from ..infra.github_auth import verify_github_token


class VulnCageClient:
    """Client for checking package versions against advisory feeds.

    The container and its resources are initialized once and reused across calls.

    Example:
        # Using default configuration (from environment variables)
        client = VulnCageClient()
        vulns = client.scan("actions", "runner", "2.296.0")
        client.close()

        # Using context manager (recommended)
        with VulnCageClient(sources=["github", "osv"]) as client:
            for v in client.scan("actions", "runner", "v2.283.3"):
                print(v.id, v.severity.name)
    """

    def __init__(
        self,
        *,
        github_token: str | None = None,
        sources: Sequence[str] | None = None,
        http_timeout_seconds: float | None = None,
    ):
        """Initialize the client.

        Args:
            github_token: Optional GitHub token. If None, uses VULN_CAGE_GITHUB_TOKEN.
            sources: Advisory sources to query, in order ("github", "osv").
                     If None, uses VULN_CAGE_SOURCES or the default (["github"]).
            http_timeout_seconds: Optional HTTP timeout. If None, uses
                                  VULN_CAGE_HTTP_TIMEOUT_SECONDS or the default (20).
        """
        self._container = Container()

        # Build config dict with only provided values
        config_dict: dict = {}
        if github_token is not None:
            config_dict["github_token"] = github_token
        if sources is not None:
            config_dict["sources"] = list(sources)
        if http_timeout_seconds is not None:
            config_dict["http_timeout_seconds"] = http_timeout_seconds

        if config_dict:
            config = AppConfig(**config_dict)
            self._container.config.from_pydantic(config)

        self._container.init_resources()

    @property
    def container(self) -> Container:
        return self._container

    def scan(
        self,
        vendor: str,
        product: str,
        version: str,
        *,
        published_at: datetime | None = None,
    ) -> list[Vulnerability]:
        """Return the advisories affecting ``vendor/product`` at ``version``.

        Args:
            vendor: Package vendor (GitHub owner).
            product: Package product (GitHub repository).
            version: Version to check; the "v" prefix is optional.
            published_at: Release date of the version, if known.

        Raises:
            InvalidVersionError: If ``version`` is not a semantic version.
            NoSourcesError: If no source is configured.
            CollaboratorError: If any source fails; no partial result is returned.
        """
        package = Package.create(vendor, product, version, published_at)
        return self.scan_package(package)

    def scan_package(self, package: Package) -> list[Vulnerability]:
        uc = self._container.scan_uc()
        return uc.execute(package)

    def verify_token(self, token: str | None = None) -> None:
        """Verify ``token`` (or the configured GitHub token) against the GitHub API."""
        if token is None:
            token = self._container.config.github_token()
        verify_github_token(token or "")

    def close(self) -> None:
        """Close the client and release resources."""
        self._container.shutdown_resources()

    def __enter__(self) -> VulnCageClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "VulnCageClient",
    "AppConfig",
]
