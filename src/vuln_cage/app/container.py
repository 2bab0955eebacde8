from __future__ import annotations

import logging
from typing import Callable, Sequence

from dependency_injector import containers, providers

from ..config.settings import AppConfig
from ..core.ports.source_port import AdvisorySourcePort
from ..core.services.matcher import VulnerabilityMatcher
from ..core.usecases.scan_package import ScanPackageUseCase
from ..infra.github_advisories import GitHubAdvisorySource
from ..infra.http_client import HttpClient
from ..infra.osv_source import OsvAdvisorySource

logger = logging.getLogger(__name__)


def http_client_resource(timeout_seconds):
	logger.debug(f"Opening HTTP client (timeout={timeout_seconds}s)")
	with HttpClient(timeout_seconds=timeout_seconds) as client:
		yield client
	logger.debug("HTTP client closed")


def select_sources(
	names: Sequence[str],
	github: Callable[[], AdvisorySourcePort],
	osv: Callable[[], AdvisorySourcePort],
) -> list[AdvisorySourcePort]:
	"""Build the configured sources, keeping the configured order."""
	factories = {"github": github, "osv": osv}
	logger.info(f"Using advisory sources: {', '.join(names)}")
	return [factories[name]() for name in names]


class Container(containers.DeclarativeContainer):
	config = providers.Configuration(pydantic_settings=[AppConfig()])

	http_client = providers.Resource(
		http_client_resource,
		timeout_seconds=config.http_timeout_seconds,
	)

	github_source = providers.Factory(
		GitHubAdvisorySource,
		http_client=http_client,
		token=config.github_token,
		ecosystem=config.github_ecosystem,
		timestamp_layout=config.github_timestamp_layout,
	)

	osv_source = providers.Factory(
		OsvAdvisorySource,
		http_client=http_client,
		ecosystem=config.osv_ecosystem,
	)

	sources = providers.Callable(
		select_sources,
		names=config.sources,
		github=github_source.provider,
		osv=osv_source.provider,
	)

	matcher = providers.Singleton(VulnerabilityMatcher)

	scan_uc = providers.Factory(ScanPackageUseCase, sources=sources, matcher=matcher)
