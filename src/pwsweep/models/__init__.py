"""pwsweep data models."""

from pwsweep.models.candidate import CandidatePath, DiscoverySource
from pwsweep.models.run_summary import ExecutionMode, Outcome, RunSummary
from pwsweep.models.scan_result import ScanResult
from pwsweep.models.source import (
    CandidateSource,
    GlobalPackageSource,
    KnownLocationSource,
    PatternSearchSource,
    SourceGroup,
)

__all__ = [
    "CandidatePath",
    "CandidateSource",
    "DiscoverySource",
    "ExecutionMode",
    "GlobalPackageSource",
    "KnownLocationSource",
    "Outcome",
    "PatternSearchSource",
    "RunSummary",
    "ScanResult",
    "SourceGroup",
]
