"""Change classification, propagation and reporting."""

from gochanged.analysis.classifier import Classifier
from gochanged.analysis.models import (
    DeltaKind,
    DependencyDelta,
    DirectoryChangeRecord,
    PackageStatus,
    Severity,
)
from gochanged.analysis.propagation import PropagationEngine
from gochanged.analysis.reporter import AffectedPackage, Reporter

__all__ = [
    "AffectedPackage",
    "Classifier",
    "DeltaKind",
    "DependencyDelta",
    "DirectoryChangeRecord",
    "PackageStatus",
    "PropagationEngine",
    "Reporter",
    "Severity",
]
