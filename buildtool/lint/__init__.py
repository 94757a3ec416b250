from .rules import LintContext, Rule, builtin_rules, lint_rule
from .policy import EffectivePolicy
from .checker import PolicyChecker

__all__ = [
    'LintContext',
    'Rule',
    'builtin_rules',
    'lint_rule',
    'EffectivePolicy',
    'PolicyChecker',
]
