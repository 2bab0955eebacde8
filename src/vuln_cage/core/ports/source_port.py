from __future__ import annotations

from typing import Protocol, Sequence

from ..domain.models import Package, Vulnerability


class AdvisorySourcePort(Protocol):
    name: str

    def fetch(self, package: Package) -> Sequence[Vulnerability]:
        """Return every advisory the source knows for the package, ranges already parsed.

        Implementations should not filter by version; matching is done by the core.
        Transport and decode failures are raised (e.g., SourceFetchError), never swallowed.
        """
        ...
