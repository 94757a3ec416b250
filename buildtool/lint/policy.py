"""
Evaluates a LintPolicy against a rule set.

Rule selection starts from the rules enabled by default, adds the
explicitly enabled ones and those given an explicit severity, and
finally removes every disabled rule.
"""
from typing import Dict, Iterable, List

from ..core.enums import Severity
from ..core.models import LintPolicy
from .rules import Rule


class EffectivePolicy:
    """The rule set and severities a LintPolicy produces"""

    def __init__(self, policy: LintPolicy, rules: Iterable[Rule]):
        self.policy = policy
        self.rules: Dict[str, Rule] = {rule.id: rule for rule in rules}

    def enabled_rule_ids(self) -> set:
        enabled = {rule_id for rule_id, rule in self.rules.items() if rule.enabled_by_default}
        enabled |= {rule_id for rule_id in self.policy.enable if rule_id in self.rules}
        enabled |= {rule_id for rule_id in self.policy.severity_overrides if rule_id in self.rules}
        # disable always wins
        enabled -= self.policy.disable
        return enabled

    def enabled_rules(self) -> List[Rule]:
        """Enabled rules in registration order"""
        enabled = self.enabled_rule_ids()
        return [rule for rule_id, rule in self.rules.items() if rule_id in enabled]

    def is_enabled(self, rule_id: str) -> bool:
        return rule_id in self.enabled_rule_ids()

    def severity_for(self, rule: Rule) -> Severity:
        severity = self.policy.severity_overrides.get(rule.id, rule.default_severity)
        if self.policy.warnings_as_errors and severity == Severity.WARNING:
            return Severity.ERROR
        return severity

    def unknown_rule_ids(self) -> List[str]:
        """Rule ids the policy mentions that no registered rule implements"""
        mentioned = set(self.policy.enable) | set(self.policy.disable) | set(self.policy.severity_overrides)
        return sorted(mentioned - set(self.rules))
