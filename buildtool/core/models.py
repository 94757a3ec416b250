from dataclasses import dataclass, field, asdict
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Any

from .enums import DependencyScope, ReportFormat, ResolutionReason, RuleCategory, Severity
from .errors import MalformedConfig


def _freeze(obj, name: str, value: Mapping) -> None:
    # frozen dataclasses need object.__setattr__ to normalize fields
    object.__setattr__(obj, name, MappingProxyType(dict(value)))


@dataclass(frozen=True)
class PluginDeclaration:
    """A plugin id with an optional version, applied or only declared"""
    id: str
    version: Optional[str] = None
    apply: bool = True


@dataclass(frozen=True)
class CompileOptions:
    """Java/Kotlin language levels"""
    source_compatibility: Optional[str] = None
    target_compatibility: Optional[str] = None
    jvm_target: Optional[str] = None


@dataclass(frozen=True)
class ProjectConfig:
    """Project identity, SDK bounds and versioning"""
    namespace: str
    min_sdk: int
    target_sdk: int
    compile_sdk: int
    version_code: int = 1
    version_name: str = "1.0"
    application_id: Optional[str] = None
    test_instrumentation_runner: Optional[str] = None
    build_features: Mapping[str, bool] = field(default_factory=dict)
    compile_options: CompileOptions = field(default_factory=CompileOptions)
    plugins: Tuple[PluginDeclaration, ...] = ()

    def __post_init__(self):
        if not self.namespace:
            raise MalformedConfig("namespace is required", field="project.namespace")
        for name in ("min_sdk", "target_sdk", "compile_sdk", "version_code"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise MalformedConfig(f"must be a positive integer, got {value!r}", field=f"project.{name}")
        if not (self.min_sdk <= self.target_sdk <= self.compile_sdk):
            raise MalformedConfig(
                f"SDK bounds must satisfy min_sdk <= target_sdk <= compile_sdk "
                f"(got {self.min_sdk}, {self.target_sdk}, {self.compile_sdk})",
                field="project",
            )
        if self.application_id is None:
            object.__setattr__(self, "application_id", self.namespace)
        _freeze(self, "build_features", self.build_features)
        object.__setattr__(self, "plugins", tuple(self.plugins))

    def applied_plugins(self) -> List[PluginDeclaration]:
        return [plugin for plugin in self.plugins if plugin.apply]


# Attributes a variant can override; lists accumulate along the init_with chain
VARIANT_SCALAR_ATTRIBUTES = (
    "minify_enabled",
    "shrink_resources",
    "debuggable",
    "application_id_suffix",
    "version_name_suffix",
)
VARIANT_LIST_ATTRIBUTES = ("proguard_files", "matching_fallbacks")


@dataclass(frozen=True)
class VariantAttributes:
    """Attribute overrides declared on a build variant. None means not set."""
    minify_enabled: Optional[bool] = None
    shrink_resources: Optional[bool] = None
    debuggable: Optional[bool] = None
    proguard_files: Tuple[str, ...] = ()
    matching_fallbacks: Tuple[str, ...] = ()
    application_id_suffix: Optional[str] = None
    version_name_suffix: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "proguard_files", tuple(self.proguard_files))
        object.__setattr__(self, "matching_fallbacks", tuple(self.matching_fallbacks))

    def to_dict(self) -> Dict[str, Any]:
        """Only the attributes that are actually set"""
        result = {}
        for name in VARIANT_SCALAR_ATTRIBUTES:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        for name in VARIANT_LIST_ATTRIBUTES:
            value = getattr(self, name)
            if value:
                result[name] = list(value)
        return result


@dataclass(frozen=True)
class BuildVariant:
    """A named build type, optionally initialized from another one"""
    name: str
    init_with: Optional[str] = None
    overrides: VariantAttributes = field(default_factory=VariantAttributes)


@dataclass(frozen=True)
class ResolvedVariant:
    """Effective attribute set of a variant after inheritance"""
    name: str
    lineage: Tuple[str, ...]
    minify_enabled: bool = False
    shrink_resources: bool = False
    debuggable: bool = False
    proguard_files: Tuple[str, ...] = ()
    matching_fallbacks: Tuple[str, ...] = ()
    application_id_suffix: str = ""
    version_name_suffix: str = ""

    @property
    def parent(self) -> Optional[str]:
        return self.lineage[1] if len(self.lineage) > 1 else None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        for key in ("lineage",) + VARIANT_LIST_ATTRIBUTES:
            result[key] = list(result[key])
        return result


@dataclass(frozen=True, order=True)
class Coordinate:
    """group:artifact:version"""
    group: str
    artifact: str
    version: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.group, self.artifact)

    @classmethod
    def parse(cls, notation: str) -> 'Coordinate':
        parts = str(notation).strip().split(":")
        if len(parts) != 3 or not all(parts):
            raise MalformedConfig(
                f"Dependency coordinate must be 'group:artifact:version', got {notation!r}",
                field="dependencies",
            )
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


@dataclass(frozen=True)
class DependencyDeclaration:
    """A coordinate declared in a configuration, optionally variant-specific"""
    scope: DependencyScope
    coordinate: Coordinate
    variant: Optional[str] = None

    @property
    def configuration(self) -> str:
        """Gradle configuration name, e.g. debugImplementation"""
        if not self.variant:
            return self.scope.value
        scope_name = self.scope.value
        return f"{self.variant}{scope_name[0].upper()}{scope_name[1:]}"


@dataclass(frozen=True)
class ResolvedDependency:
    coordinate: Coordinate
    requested: Tuple[str, ...]
    reason: ResolutionReason

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coordinate': str(self.coordinate),
            'requested': list(self.requested),
            'reason': self.reason.value,
        }


@dataclass(frozen=True)
class LintPolicy:
    """Lint rule selection, severities and report outputs"""
    enable: FrozenSet[str] = frozenset()
    disable: FrozenSet[str] = frozenset()
    severity_overrides: Mapping[str, Severity] = field(default_factory=dict)
    abort_on_error: bool = True
    warnings_as_errors: bool = False
    check_release_builds: bool = True
    check_dependencies: bool = True
    explain_issues: bool = True
    absolute_paths: bool = True
    html_report: bool = True
    xml_report: bool = True
    sarif_report: bool = False
    text_report: bool = False
    html_output: Optional[str] = None
    xml_output: Optional[str] = None
    sarif_output: Optional[str] = None
    text_output: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "enable", frozenset(self.enable))
        object.__setattr__(self, "disable", frozenset(self.disable))
        _freeze(self, "severity_overrides", self.severity_overrides)

    def outputs(self) -> Dict[ReportFormat, str]:
        """Enabled report formats mapped to their output paths"""
        outputs = {}
        for report_format in ReportFormat:
            enabled = getattr(self, f"{report_format.value}_report")
            path = getattr(self, f"{report_format.value}_output")
            if enabled and path:
                outputs[report_format] = path
        return outputs


@dataclass(frozen=True)
class Finding:
    """A single rule violation"""
    rule_id: str
    severity: Severity
    message: str
    category: RuleCategory
    location: str
    explanation: Optional[str] = None
    summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'rule_id': self.rule_id,
            'severity': self.severity.value,
            'message': self.message,
            'category': self.category.value,
            'location': self.location,
        }
        if self.explanation:
            result['explanation'] = self.explanation
        if self.summary:
            result['summary'] = self.summary
        return result


@dataclass(frozen=True)
class LintReport:
    """Findings of one policy run against one variant"""
    variant: str
    findings: Tuple[Finding, ...] = ()
    checked_rules: Tuple[str, ...] = ()
    unknown_rules: Tuple[str, ...] = ()
    skipped: bool = False
    source_path: Optional[str] = None

    def errors(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    def informational(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.INFORMATIONAL]

    def has_errors(self) -> bool:
        return bool(self.errors())

    def counts(self) -> Dict[str, int]:
        return {
            Severity.ERROR.value: len(self.errors()),
            Severity.WARNING.value: len(self.warnings()),
            Severity.INFORMATIONAL.value: len(self.informational()),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'variant': self.variant,
            'skipped': self.skipped,
            'counts': self.counts(),
            'findings': [f.to_dict() for f in self.findings],
            'checked_rules': list(self.checked_rules),
            'unknown_rules': list(self.unknown_rules),
        }


@dataclass(frozen=True)
class BuildDescription:
    """Everything loaded from one project description file"""
    project: ProjectConfig
    variants: Mapping[str, BuildVariant]
    dependencies: Tuple[DependencyDeclaration, ...] = ()
    dependency_overrides: Mapping[Tuple[str, str], str] = field(default_factory=dict)
    lint: LintPolicy = field(default_factory=LintPolicy)
    source_path: Optional[str] = None

    def __post_init__(self):
        _freeze(self, "variants", self.variants)
        _freeze(self, "dependency_overrides", self.dependency_overrides)
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    def variant_names(self) -> List[str]:
        return list(self.variants.keys())
