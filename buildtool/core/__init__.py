from .enums import DependencyScope, ReportFormat, ResolutionReason, RuleCategory, Severity
from .errors import (
    BuildConfigError,
    CyclicVariantInheritance,
    MalformedConfig,
    PolicyViolation,
    UnresolvedConflict,
)
from .models import (
    BuildDescription,
    BuildVariant,
    CompileOptions,
    Coordinate,
    DependencyDeclaration,
    Finding,
    LintPolicy,
    LintReport,
    PluginDeclaration,
    ProjectConfig,
    ResolvedDependency,
    ResolvedVariant,
    VariantAttributes,
)

__all__ = [
    'DependencyScope',
    'ReportFormat',
    'ResolutionReason',
    'RuleCategory',
    'Severity',
    'BuildConfigError',
    'CyclicVariantInheritance',
    'MalformedConfig',
    'PolicyViolation',
    'UnresolvedConflict',
    'BuildDescription',
    'BuildVariant',
    'CompileOptions',
    'Coordinate',
    'DependencyDeclaration',
    'Finding',
    'LintPolicy',
    'LintReport',
    'PluginDeclaration',
    'ProjectConfig',
    'ResolvedDependency',
    'ResolvedVariant',
    'VariantAttributes',
]
