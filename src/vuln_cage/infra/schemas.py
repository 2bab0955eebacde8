from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class OsvSeverity(BaseModel):
	"""Severity entry (e.g., a CVSS vector)"""
	type: str
	score: str | float


class OsvPackage(BaseModel):
	ecosystem: str
	name: str
	purl: Optional[str] = None


class OsvEvent(BaseModel):
	"""A single boundary of a version range"""
	introduced: Optional[str] = None
	fixed: Optional[str] = None
	last_affected: Optional[str] = None
	limit: Optional[str] = None


class OsvRange(BaseModel):
	type: str
	repo: Optional[str] = None
	events: list[OsvEvent]


class OsvAffected(BaseModel):
	package: OsvPackage
	ranges: Optional[list[OsvRange]] = None
	versions: Optional[list[str]] = None
	ecosystem_specific: Optional[dict[str, Any]] = None
	database_specific: Optional[dict[str, Any]] = None


class OsvDatabaseSpecific(BaseModel):
	severity: Optional[str] = None
	cwe_ids: list[str] | None = None
	github_reviewed: Optional[bool] = None


class OsvVulnerability(BaseModel):
	"""Top-level OSV record"""
	schema_version: Optional[str] = Field(None, alias='schema_version')
	id: str
	modified: Optional[str] = None
	published: Optional[str] = None
	withdrawn: Optional[str] = None
	aliases: Optional[list[str]] = None
	summary: Optional[str] = None
	details: Optional[str] = None
	severity: Optional[list[OsvSeverity]] = None
	affected: list[OsvAffected] | None = None
	database_specific: Optional[OsvDatabaseSpecific] = None


class OsvQueryResponse(BaseModel):
	vulns: list[OsvVulnerability] = Field(default_factory=list)
	next_page_token: Optional[str] = None


class GhAdvisoryIdentifier(BaseModel):
	ghsa_id: str


class GhPackage(BaseModel):
	ecosystem: str
	name: Optional[str] = None


class GhVulnerability(BaseModel):
	package: GhPackage
	vulnerable_version_range: Optional[str] = None
	first_patched_version: Optional[str] = None


class GhCvss(BaseModel):
	vector_string: Optional[str] = None
	score: Optional[float] = None


class GhCwe(BaseModel):
	cwe_id: str
	name: Optional[str] = None


class GitHubAdvisory(BaseModel):
	ghsa_id: str
	cve_id: Optional[str] = None
	summary: Optional[str] = None
	severity: Optional[str] = None
	published_at: str
	withdrawn_at: Optional[str] = None
	vulnerabilities: list[GhVulnerability] | None = None
	cvss: Optional[GhCvss] = None
	cwes: list[GhCwe] | None = None
