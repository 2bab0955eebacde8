from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Sequence

import pytest
from dependency_injector import providers

from vuln_cage.app import cli
from vuln_cage.app.cli import app
from vuln_cage.app.container import Container
from vuln_cage.core.domain.exceptions import InvalidTokenError, SourceFetchError
from vuln_cage.core.domain.models import Package, RangePair, Vulnerability
from vuln_cage.core.domain.version import VersionRange, parse_range_list


def _vuln(id: str, expression: str, patched: str | None, day: int) -> Vulnerability:
    return Vulnerability(
        id=id,
        cve_id=f"CVE-2022-{day:05d}",
        score=8.8,
        published_at=datetime(2022, 9, day, tzinfo=timezone.utc),
        ranges=(RangePair(parse_range_list(expression)[0], VersionRange.parse(patched) if patched else None),),
    )


class _FakeSource:
    name = "fake"

    def __init__(self, vulns: Sequence[Vulnerability]) -> None:
        self._vulns = list(vulns)

    def fetch(self, package: Package) -> Sequence[Vulnerability]:
        return self._vulns


class _BrokenSource:
    name = "broken"

    def fetch(self, package: Package) -> Sequence[Vulnerability]:
        raise SourceFetchError(self.name, "service unavailable")


@pytest.fixture
def use_sources(monkeypatch):
    """Run the CLI against in-memory sources instead of the network."""

    def install(sources):
        @contextmanager
        def fake_provide_container(config=None):
            container = Container()
            if config is not None:
                container.config.from_pydantic(config)
            container.sources.override(providers.Object(list(sources)))
            try:
                yield container
            finally:
                container.sources.reset_override()

        monkeypatch.setattr(cli, "provide_container", fake_provide_container)

    return install


ADVISORIES = [
    _vuln("GHSA-old", "< 2.283.4", ">= 2.283.4", 1),
    _vuln("GHSA-new", ">= 2.294.0, < 2.296.1", ">= 2.296.2", 21),
]


def test_help(runner):
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "scan" in result.output
    assert "check" in result.output
    assert "verify-token" in result.output


def test_scan_prints_table(runner, use_sources):
    use_sources([_FakeSource(ADVISORIES)])
    result = runner.invoke(app, ["scan", "actions", "runner", "2.296.0"])
    assert result.exit_code == 0, result.output
    assert "1 vulnerabilities affect actions/runner@v2.296.0" in result.stdout
    assert "GHSA-new" in result.stdout
    assert "GHSA-old" not in result.stdout
    assert "fixed in v2.296.2" in result.stdout


def test_scan_without_matches(runner, use_sources):
    use_sources([_FakeSource(ADVISORIES)])
    result = runner.invoke(app, ["scan", "actions", "runner", "v3.0.0"])
    assert result.exit_code == 0
    assert "No known vulnerabilities for actions/runner@v3.0.0" in result.stdout


def test_scan_json_output(runner, use_sources):
    use_sources([_FakeSource(ADVISORIES)])
    result = runner.invoke(app, ["scan", "actions", "runner", "2.0.0", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [item["id"] for item in data] == ["GHSA-old"]
    assert data[0]["severity"] == "HIGH"
    assert data[0]["ranges"] == [{"vulnerable": "[v0.0.0, v2.283.4)", "patched": "[v2.283.4, ∞)"}]


def test_scan_invalid_version(runner, use_sources):
    use_sources([_FakeSource(ADVISORIES)])
    result = runner.invoke(app, ["scan", "actions", "runner", "latest"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_scan_unknown_source(runner, use_sources):
    use_sources([_FakeSource(ADVISORIES)])
    result = runner.invoke(app, ["scan", "actions", "runner", "1.0.0", "--source", "nvd"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_scan_source_failure(runner, use_sources):
    use_sources([_FakeSource(ADVISORIES), _BrokenSource()])
    result = runner.invoke(app, ["scan", "actions", "runner", "2.0.0"])
    assert result.exit_code == 1
    assert "broken: service unavailable" in result.output
    assert "GHSA-old" not in result.output


def test_check_inside(runner):
    result = runner.invoke(app, ["check", ">= 1.0, < 2.0", "1.5"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "v1.5 is inside [v1.0, v2.0)"


def test_check_outside(runner):
    result = runner.invoke(app, ["check", "< 1.0", "1.5"])
    assert result.exit_code == 3
    assert "outside" in result.stdout


def test_check_invalid_expression(runner):
    result = runner.invoke(app, ["check", ">==1.0", "1.0"])
    assert result.exit_code == 1
    assert 'the operator ">==" is not valid' in result.output


def test_verify_token_missing(runner):
    result = runner.invoke(app, ["verify-token"])
    assert result.exit_code == 1
    assert "token must not be an empty string" in result.output


def test_verify_token_rejected(runner, monkeypatch):
    def fake_verify(token: str) -> None:
        raise InvalidTokenError()

    monkeypatch.setattr(cli, "verify_github_token", fake_verify)
    result = runner.invoke(app, ["verify-token", "ghp_bad"])
    assert result.exit_code == 1
    assert "the given token is not valid" in result.output


def test_verify_token_ok_from_env(runner, monkeypatch):
    seen: list[str] = []
    monkeypatch.setattr(cli, "verify_github_token", seen.append)
    monkeypatch.setenv("VULN_CAGE_GITHUB_TOKEN", "ghp_env")
    result = runner.invoke(app, ["verify-token"])
    assert result.exit_code == 0
    assert "Token is valid" in result.stdout
    assert seen == ["ghp_env"]
