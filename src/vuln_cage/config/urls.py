from __future__ import annotations


GITHUB_API_URL = "https://api.github.com"
OSV_QUERY_URL = "https://api.osv.dev/v1/query"


def get_github_repo_advisories_url(owner: str, name: str) -> str:
	return f"{GITHUB_API_URL}/repos/{owner}/{name}/security-advisories"


def get_github_advisory_url(ghsa_id: str) -> str:
	return f"{GITHUB_API_URL}/advisories/{ghsa_id}"
