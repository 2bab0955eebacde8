from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_SOURCES = ("github", "osv")


class AppConfig(BaseSettings):
    """Application configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the VULN_CAGE_ prefix.
    For example:
        - VULN_CAGE_GITHUB_TOKEN=ghp_xxx
        - VULN_CAGE_SOURCES='["github", "osv"]'
        - VULN_CAGE_HTTP_TIMEOUT_SECONDS=10

    Alternatively, settings can be provided programmatically when creating the Container:
        container = Container()
        container.config.from_pydantic(AppConfig(github_token="ghp_xxx"))
    """

    model_config = SettingsConfigDict(
        env_prefix="VULN_CAGE_",
        case_sensitive=False,
        extra="forbid",
    )

    github_token: Optional[str] = Field(
        default=None,
        description="GitHub personal access token sent with advisory requests",
    )

    sources: list[str] = Field(
        default_factory=lambda: ["github"],
        min_length=1,
        description=f"Advisory sources to query, in order. Supported: {', '.join(SUPPORTED_SOURCES)}",
    )

    github_ecosystem: str = Field(
        default="actions",
        description="GitHub advisory ecosystem the package belongs to",
    )

    osv_ecosystem: str = Field(
        default="GitHub Actions",
        description="OSV ecosystem the package belongs to",
    )

    github_timestamp_layout: str = Field(
        default="%Y-%m-%dT%H:%M:%SZ",
        description="strptime layout of GitHub advisory 'published_at' fields",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout applied to every advisory HTTP request",
    )

    @field_validator("sources")
    @classmethod
    def _known_sources(cls, value: list[str]) -> list[str]:
        names = [name.strip().lower() for name in value]
        unknown = [name for name in names if name not in SUPPORTED_SOURCES]
        if unknown:
            raise ValueError(f"unknown source(s): {', '.join(unknown)}")
        return names
