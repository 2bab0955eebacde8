from __future__ import annotations

from datetime import datetime, timezone

import pytest
from dependency_injector import providers
from pydantic import ValidationError

from vuln_cage import VulnCageClient
from vuln_cage.app import api
from vuln_cage.core.domain.exceptions import InvalidVersionError, NoSourcesError
from vuln_cage.core.domain.models import Package, RangePair, Vulnerability
from vuln_cage.core.domain.version import VersionRange
from vuln_cage.infra.github_advisories import GitHubAdvisorySource
from vuln_cage.infra.osv_source import OsvAdvisorySource


class _FakeSource:
    name = "fake"

    def __init__(self, *vulns: Vulnerability) -> None:
        self._vulns = list(vulns)
        self.packages: list[Package] = []

    def fetch(self, package: Package):
        self.packages.append(package)
        return self._vulns


VULN = Vulnerability(
    id="GHSA-2c6m-6gqh-6qg3",
    published_at=datetime(2022, 9, 21, tzinfo=timezone.utc),
    ranges=(RangePair(VersionRange.parse("< 2.296.2"), VersionRange.parse(">= 2.296.2")),),
)


def test_client_scan_uses_configured_sources():
    source = _FakeSource(VULN)
    with VulnCageClient() as client:
        client.container.sources.override(providers.Object([source]))
        assert client.scan("actions", "runner", "2.296.0") == [VULN]
        assert client.scan("actions", "runner", "2.296.2") == []
    assert source.packages[0].name == "actions/runner"


def test_client_scan_package():
    with VulnCageClient() as client:
        client.container.sources.override(providers.Object([_FakeSource(VULN)]))
        package = Package.create("actions", "runner", "v2.0.0")
        assert client.scan_package(package) == [VULN]


def test_client_scan_rejects_invalid_version():
    with VulnCageClient() as client:
        client.container.sources.override(providers.Object([_FakeSource(VULN)]))
        with pytest.raises(InvalidVersionError):
            client.scan("actions", "runner", "main")


def test_client_without_sources():
    with VulnCageClient() as client:
        client.container.sources.override(providers.Object([]))
        with pytest.raises(NoSourcesError):
            client.scan("actions", "runner", "1.0.0")


def test_client_builds_sources_in_configured_order():
    with VulnCageClient(sources=["osv", "github"], github_token="ghp_x") as client:
        sources = client.container.sources()
        assert [type(s) for s in sources] == [OsvAdvisorySource, GitHubAdvisorySource]
        assert sources[1]._token == "ghp_x"


def test_client_rejects_unknown_source():
    with pytest.raises(ValidationError):
        VulnCageClient(sources=["nvd"])


def test_client_verify_token_uses_configured_token(monkeypatch):
    seen: list[str] = []
    monkeypatch.setattr(api, "verify_github_token", seen.append)
    with VulnCageClient(github_token="ghp_cfg") as client:
        client.verify_token()
        client.verify_token("ghp_arg")
    assert seen == ["ghp_cfg", "ghp_arg"]
