"""Data models for change classification and propagation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class Severity(IntEnum):
    """How strongly a package is believed to be affected. Ordered."""

    UNAFFECTED = 0
    TEST_AFFECTED = 1
    FULLY_AFFECTED = 2

    @property
    def label(self) -> str:
        return self.name.lower()


class DeltaKind(str, Enum):
    """Ways a dependency can differ between two go.mod snapshots."""

    NEW_REQUIRE = "new dependency"
    VERSION_CHANGED = "changed dependency"
    NEW_REPLACE = "new replace"
    REPLACE_CHANGED = "changed replace"
    REPLACE_REMOVED = "removed replace"


@dataclass(frozen=True)
class DependencyDelta:
    module_path: str
    kind: DeltaKind

    @property
    def reason(self) -> str:
        return f"{self.kind.value} {self.module_path}"


@dataclass(frozen=True)
class DirectoryChangeRecord:
    """A changed directory and the severity its changes contribute."""

    directory: str
    severity: Severity
    relative: str = ""  # directory relative to the module root, for reasons


@dataclass
class PackageStatus:
    """Mutable per-package status. Severity only ever goes up."""

    severity: Severity = Severity.UNAFFECTED
    full_reasons: set[str] = field(default_factory=set)
    test_reasons: set[str] = field(default_factory=set)

    def raise_to(
        self,
        severity: Severity,
        full_reasons: set[str] | frozenset[str] = frozenset(),
        test_reasons: set[str] | frozenset[str] = frozenset(),
    ) -> bool:
        """Raise severity and merge reasons. Returns True if anything changed."""
        changed = False
        if severity > self.severity:
            self.severity = severity
            changed = True
        if not full_reasons <= self.full_reasons:
            self.full_reasons |= full_reasons
            changed = True
        if not test_reasons <= self.test_reasons:
            self.test_reasons |= test_reasons
            changed = True
        return changed

    @property
    def reasons(self) -> set[str]:
        return self.full_reasons | self.test_reasons

    def sorted_reasons(self) -> list[str]:
        return sorted(self.reasons)
