"""
Models for build orchestration.
"""
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any
from enum import Enum

from ..core.models import LintReport


class ChangeType(Enum):
    """How a variant's fingerprint compares to the previous build"""
    NEW = "new"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass
class BuildMetadata:
    """Metadata persisted for a built variant"""
    variant: str
    fingerprint: str
    source_path: str
    built_at: str
    source_hash: str = ""
    lint_counts: Dict[str, int] = field(default_factory=dict)
    runtime_classpath: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildMetadata':
        """Create from dictionary"""
        return cls(**data)


@dataclass
class VariantBuildResult:
    """Result of building a single variant"""
    variant: str
    fingerprint: str
    change_type: ChangeType
    lint: LintReport
    reports: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'variant': self.variant,
            'fingerprint': self.fingerprint,
            'change_type': self.change_type.value,
            'lint': self.lint.to_dict(),
            'reports': dict(self.reports),
        }


@dataclass
class BuildReport:
    """Comprehensive build report"""
    results: List[VariantBuildResult] = field(default_factory=list)
    orphaned: List[str] = field(default_factory=list)

    def add(self, result: VariantBuildResult) -> None:
        self.results.append(result)

    @property
    def successful(self) -> List[str]:
        return [r.variant for r in self.results]

    @property
    def changed(self) -> List[str]:
        return [r.variant for r in self.results if r.change_type != ChangeType.UNCHANGED]

    @property
    def unchanged(self) -> List[str]:
        return [r.variant for r in self.results if r.change_type == ChangeType.UNCHANGED]

    def total_findings(self) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for result in self.results:
            for severity, count in result.lint.counts().items():
                totals[severity] = totals.get(severity, 0) + count
        return totals

    def has_issues(self) -> bool:
        """Check if any variant reported lint errors or warnings"""
        totals = self.total_findings()
        return bool(totals.get('error') or totals.get('warning'))

    def print_summary(self):
        """Print human-readable summary"""
        print(f"\n{'='*80}")
        print(f"BUILD REPORT")
        print(f"{'='*80}")
        print(f"✅ Built: {len(self.successful)} variants")

        for result in self.results:
            counts = result.lint.counts()
            lint_state = "lint skipped" if result.lint.skipped else (
                f"{counts['error']} errors, {counts['warning']} warnings, "
                f"{counts['informational']} informational"
            )
            print(f"   - {result.variant} [{result.change_type.value}] {result.fingerprint[:12]}: {lint_state}")
            for report_format, path in result.reports.items():
                print(f"       {report_format}: {path}")

        if not self.has_issues():
            print("\n✨ No lint errors or warnings")

        if self.unchanged:
            print(f"\n⏭️  Unchanged since last build: {', '.join(self.unchanged)}")

        if self.orphaned:
            print(f"\n🗑️  Stale metadata for undeclared variants: {', '.join(self.orphaned)}")
        print(f"{'='*80}\n")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'successful': self.successful,
            'changed': self.changed,
            'unchanged': self.unchanged,
            'orphaned': list(self.orphaned),
            'findings': self.total_findings(),
            'results': [r.to_dict() for r in self.results],
        }
