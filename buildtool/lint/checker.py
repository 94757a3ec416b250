"""
Runs lint rules against a resolved variant.
"""
import logging
from typing import Iterable, Mapping, Optional, Tuple

from ..core.errors import PolicyViolation
from ..core.models import (
    BuildDescription, Finding, LintPolicy, LintReport, ResolvedDependency, ResolvedVariant
)
from .policy import EffectivePolicy
from .rules import LintContext, Rule, builtin_rules


class PolicyChecker:
    """Applies a LintPolicy to one resolved variant at a time"""

    def __init__(
        self,
        policy: LintPolicy,
        rules: Optional[Iterable[Rule]] = None,
        min_sdk_floor: int = 21
    ):
        """
        Initialize policy checker.

        Args:
            policy: Lint policy from the project description
            rules: Rules to choose from (built-in rules when omitted)
            min_sdk_floor: Threshold for MinSdkTooLow
        """
        self.policy = policy
        self.effective = EffectivePolicy(policy, builtin_rules() if rules is None else rules)
        self.min_sdk_floor = min_sdk_floor
        self.logger = logging.getLogger(__name__)

    def check(
        self,
        description: BuildDescription,
        variant: ResolvedVariant,
        dependencies: Optional[Mapping[str, Tuple[ResolvedDependency, ...]]] = None
    ) -> LintReport:
        """
        Run every enabled rule against the variant.

        Args:
            description: Loaded project description
            variant: Resolved variant to check
            dependencies: Resolved dependencies keyed by scope name

        Returns:
            LintReport with findings sorted by severity, then rule id
        """
        unknown = self.effective.unknown_rule_ids()
        if unknown:
            self.logger.debug(f"Policy mentions rules with no implementation: {', '.join(unknown)}")

        if not self.policy.check_release_builds and not variant.debuggable:
            self.logger.info(f"Skipping lint for release variant {variant.name} (check_release_builds is off)")
            return LintReport(
                variant=variant.name,
                unknown_rules=tuple(unknown),
                skipped=True,
                source_path=description.source_path,
            )

        context = LintContext(
            description=description,
            variant=variant,
            declarations=tuple(
                d for d in description.dependencies if d.variant is None or d.variant == variant.name
            ),
            dependencies=dict(dependencies or {}),
            min_sdk_floor=self.min_sdk_floor,
        )

        findings = []
        checked = []
        for rule in self.effective.enabled_rules():
            if rule.dependency_rule and not self.policy.check_dependencies:
                continue
            checked.append(rule.id)
            severity = self.effective.severity_for(rule)
            for location, message in rule.check(context):
                findings.append(Finding(
                    rule_id=rule.id,
                    severity=severity,
                    message=message,
                    category=rule.category,
                    location=location,
                    explanation=rule.explanation if self.policy.explain_issues else None,
                    summary=rule.summary,
                ))

        findings.sort(key=lambda f: (-f.severity.rank, f.rule_id, f.location))
        report = LintReport(
            variant=variant.name,
            findings=tuple(findings),
            checked_rules=tuple(checked),
            unknown_rules=tuple(unknown),
            source_path=description.source_path,
        )

        counts = report.counts()
        self.logger.info(
            f"Lint {variant.name}: errors={counts['error']}, warnings={counts['warning']}, "
            f"informational={counts['informational']}"
        )
        return report

    def enforce(self, report: LintReport) -> None:
        """
        Raises:
            PolicyViolation: If the report has errors and abort_on_error is set
        """
        if self.policy.abort_on_error and report.has_errors():
            raise PolicyViolation(report)
