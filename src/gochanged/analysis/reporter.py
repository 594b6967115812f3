"""Render the affected package set."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from gochanged.analysis.models import PackageStatus, Severity
from gochanged.graph.models import Package


@dataclass(frozen=True)
class AffectedPackage:
    import_path: str
    severity: Severity
    reasons: tuple[str, ...] = field(default_factory=tuple)


class Reporter:
    """Reports affected primary packages in catalog order."""

    def __init__(self, primary: list[Package], statuses: dict[str, PackageStatus]) -> None:
        self.primary = primary
        self.statuses = statuses

    def affected(self) -> list[AffectedPackage]:
        result = []
        for pkg in self.primary:
            status = self.statuses.get(pkg.import_path)
            if status is None or status.severity is Severity.UNAFFECTED:
                continue
            result.append(
                AffectedPackage(
                    import_path=pkg.import_path,
                    severity=status.severity,
                    reasons=tuple(status.sorted_reasons()),
                )
            )
        return result


def render_text(affected: list[AffectedPackage], verbose: bool = False) -> str:
    """One import path per line; verbose adds a tab-indented reason block."""
    lines: list[str] = []
    for item in affected:
        lines.append(item.import_path)
        if verbose:
            lines.extend(f"\t{reason}" for reason in item.reasons)
    return "\n".join(lines)


def render_json(affected: list[AffectedPackage], fallback: str | None = None) -> str:
    data: dict = {
        "affected": [
            {
                "import_path": item.import_path,
                "severity": item.severity.label,
                "reasons": list(item.reasons),
            }
            for item in affected
        ]
    }
    if fallback:
        data["fallback"] = fallback
    return json.dumps(data, indent=2)
