from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import typer
from pydantic import ValidationError

from .container import Container
from ..config.settings import AppConfig
from ..core.domain.exceptions import CageError, TokenVerificationError
from ..core.domain.models import Package, Vulnerability
from ..core.domain.version import Semver, parse_range_list
from ..infra.github_auth import verify_github_token
from ..shared.utils import format_timestamp


app = typer.Typer(help="Check package versions against security advisories", no_args_is_help=True)


def _configure_logging(log_level: str) -> None:
    level = logging._nameToLevel.get(log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s', force=True)


@contextmanager
def provide_container(config: AppConfig | None = None) -> Iterator[Container]:
    container = Container()
    if config is not None:
        container.config.from_pydantic(config)
    container.init_resources()
    try:
        yield container
    finally:
        container.shutdown_resources()


@app.command(help="Scan VENDOR/PRODUCT at VERSION against the configured advisory sources.")
def scan(
    vendor: str = typer.Argument(..., help="Package vendor (GitHub owner), e.g. actions"),
    product: str = typer.Argument(..., help="Package product (GitHub repository), e.g. runner"),
    version: str = typer.Argument(..., help="Version to check, e.g. 2.296.0 or v2.296.0"),
    source: Optional[list[str]] = typer.Option(None, "--source", "-s", help="Advisory source (github, osv). Repeat to query several, in order."),
    token: Optional[str] = typer.Option(None, "--token", help="GitHub token (default: VULN_CAGE_GITHUB_TOKEN)"),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level", case_sensitive=False),
) -> None:
    _configure_logging(log_level)

    try:
        package = Package.create(vendor, product, version)
    except CageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    overrides: dict = {}
    if source:
        overrides["sources"] = source
    if token:
        overrides["github_token"] = token
    try:
        config = AppConfig(**overrides) if overrides else None
    except ValidationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    with provide_container(config) as container:
        uc = container.scan_uc()
        try:
            vulns = uc.execute(package)
        except CageError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)

    if json_output:
        print(json.dumps([_to_jsonable(v) for v in vulns], ensure_ascii=False, indent=2))
    else:
        _print_list(package, vulns)


@app.command(help="Check whether VERSION is inside a range EXPRESSION such as '>= 1.0, < 2.0'. Exits 3 when outside.")
def check(
    expression: str = typer.Argument(..., help="Range expression"),
    version: str = typer.Argument(..., help="Version to test"),
) -> None:
    try:
        ranges = parse_range_list(expression)
        semver = Semver.parse(version)
    except CageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    inside = any(r.contains(semver) for r in ranges)
    rendered = ", ".join(str(r) for r in ranges)
    typer.echo(f"{semver} is {'inside' if inside else 'outside'} {rendered}")
    if not inside:
        raise typer.Exit(code=3)


@app.command("verify-token", help="Verify a GitHub token against the GitHub API.")
def verify_token(
    token: Optional[str] = typer.Argument(None, envvar="VULN_CAGE_GITHUB_TOKEN", help="Token to verify"),
) -> None:
    try:
        verify_github_token(token or "")
    except TokenVerificationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Token is valid")


def _to_jsonable(v: Vulnerability) -> dict:
    return {
        "id": v.id,
        "cve_id": v.cve_id,
        "summary": v.summary,
        "severity": v.severity.name,
        "score": v.score,
        "cwes": list(v.cwes),
        "published_at": v.published_at.isoformat(),
        "ranges": [
            {"vulnerable": str(p.vulnerable), "patched": str(p.patched) if p.patched else None}
            for p in v.ranges
        ],
    }


def _print_list(package: Package, vulns: Sequence[Vulnerability]) -> None:
    """Print a table of matched advisories: ID, CVE, severity, score, published, ranges."""
    if not vulns:
        print(f"No known vulnerabilities for {package.name}@{package.version}")
        return

    print(f"{len(vulns)} vulnerabilities affect {package.name}@{package.version}")
    print(f"{'ID':22} {'CVE':17} {'Severity':10} {'Score':>5} {'Published':19} Ranges")
    for v in vulns:
        ranges = "; ".join(
            f"{p.vulnerable} fixed in {p.patched.start}" if p.patched else f"{p.vulnerable} no fix"
            for p in v.ranges
        )
        print(f"{v.id:22} {v.cve_id or '-':17} {v.severity.name:10} {v.score:>5.1f} {format_timestamp(v.published_at):19} {ranges}")


if __name__ == "__main__":  # pragma: no cover
    app()
