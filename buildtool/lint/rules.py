"""
Built-in lint rules.

Each rule is a generator over a LintContext yielding (location, message)
pairs. Rules are registered in the module-level registry by the
lint_rule decorator; the checker decides which of them run and at what
severity.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..core.enums import RuleCategory, Severity
from ..core.models import (
    BuildDescription, DependencyDeclaration, ResolvedDependency, ResolvedVariant
)
from ..resolve.version import Version


@dataclass(frozen=True)
class LintContext:
    """What a rule may look at"""
    description: BuildDescription
    variant: ResolvedVariant
    declarations: Tuple[DependencyDeclaration, ...]
    dependencies: Mapping[str, Tuple[ResolvedDependency, ...]] = field(default_factory=dict)
    min_sdk_floor: int = 21

    @property
    def project(self):
        return self.description.project

    def resolved_version(self, declaration: DependencyDeclaration) -> Optional[str]:
        for dependency in self.dependencies.get(declaration.scope.value, ()):
            if dependency.coordinate.key == declaration.coordinate.key:
                return dependency.coordinate.version
        return None


RuleCheck = Callable[[LintContext], Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class Rule:
    id: str
    summary: str
    explanation: str
    category: RuleCategory
    default_severity: Severity
    check: RuleCheck
    enabled_by_default: bool = True
    dependency_rule: bool = False


_BUILTIN_RULES: Dict[str, Rule] = {}


def lint_rule(
    rule_id: str,
    summary: str,
    explanation: str,
    category: RuleCategory,
    severity: Severity,
    enabled_by_default: bool = True,
    dependency_rule: bool = False
):
    """Register a check function as a built-in rule"""
    def decorator(func: RuleCheck) -> RuleCheck:
        _BUILTIN_RULES[rule_id] = Rule(
            id=rule_id,
            summary=summary,
            explanation=explanation,
            category=category,
            default_severity=severity,
            check=func,
            enabled_by_default=enabled_by_default,
            dependency_rule=dependency_rule,
        )
        return func
    return decorator


def builtin_rules() -> List[Rule]:
    """All built-in rules, in registration order"""
    return list(_BUILTIN_RULES.values())


@lint_rule(
    "OldTargetApi",
    "Target SDK attribute is not targeting latest version",
    "targetSdk should match compileSdk so the app runs without "
    "compatibility behaviors on current platform versions.",
    RuleCategory.COMPATIBILITY,
    Severity.WARNING,
)
def check_old_target_api(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    if ctx.project.target_sdk < ctx.project.compile_sdk:
        yield (
            "project.target_sdk",
            f"Not targeting the latest SDK: compileSdk is {ctx.project.compile_sdk} "
            f"but targetSdk is {ctx.project.target_sdk}",
        )


@lint_rule(
    "MinSdkTooLow",
    "Minimum SDK is below the supported floor",
    "Supporting very old platform versions costs build complexity; "
    "raise minSdk to the configured floor.",
    RuleCategory.COMPATIBILITY,
    Severity.WARNING,
)
def check_min_sdk(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    if ctx.project.min_sdk < ctx.min_sdk_floor:
        yield (
            "project.min_sdk",
            f"minSdk {ctx.project.min_sdk} is below the supported floor {ctx.min_sdk_floor}",
        )


@lint_rule(
    "HardcodedDebugMode",
    "Debuggable variant not derived from debug",
    "Only debug builds should be debuggable. A debuggable release-style "
    "variant exposes the app to attached debuggers.",
    RuleCategory.SECURITY,
    Severity.WARNING,
)
def check_debug_mode(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    if ctx.variant.debuggable and "debug" not in ctx.variant.lineage:
        yield (
            f"build_types.{ctx.variant.name}.debuggable",
            f"Variant '{ctx.variant.name}' is debuggable but does not derive from debug",
        )


@lint_rule(
    "ShrinkResourcesWithoutMinify",
    "Resource shrinking requires code shrinking",
    "shrink_resources only works together with minify_enabled; the build "
    "fails otherwise.",
    RuleCategory.CORRECTNESS,
    Severity.ERROR,
)
def check_shrink_without_minify(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    if ctx.variant.shrink_resources and not ctx.variant.minify_enabled:
        yield (
            f"build_types.{ctx.variant.name}.shrink_resources",
            f"Variant '{ctx.variant.name}' shrinks resources without enabling minify",
        )


@lint_rule(
    "MinifyWithoutProguardFiles",
    "Minified variant has no ProGuard rules",
    "Code shrinking without keep rules strips classes that are only "
    "reached through reflection.",
    RuleCategory.CORRECTNESS,
    Severity.WARNING,
)
def check_minify_rules(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    if ctx.variant.minify_enabled and not ctx.variant.proguard_files:
        yield (
            f"build_types.{ctx.variant.name}.proguard_files",
            f"Variant '{ctx.variant.name}' enables minify without any proguard_files",
        )


@lint_rule(
    "UnknownMatchingFallback",
    "Matching fallback names an undeclared variant",
    "matching_fallbacks entries must name declared build types, otherwise "
    "dependency variant matching cannot fall back.",
    RuleCategory.CORRECTNESS,
    Severity.ERROR,
)
def check_matching_fallbacks(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    for fallback in ctx.variant.matching_fallbacks:
        if fallback not in ctx.description.variants:
            yield (
                f"build_types.{ctx.variant.name}.matching_fallbacks",
                f"Fallback '{fallback}' is not a declared variant",
            )


@lint_rule(
    "StopShip",
    "STOPSHIP marker present",
    "A STOPSHIP marker in the version name blocks shipping until removed.",
    RuleCategory.CORRECTNESS,
    Severity.WARNING,
    enabled_by_default=False,
)
def check_stop_ship(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    full_name = ctx.project.version_name + ctx.variant.version_name_suffix
    if "STOPSHIP" in full_name:
        yield ("project.version_name", f"Version name '{full_name}' contains STOPSHIP")


@lint_rule(
    "JavaVersionMismatch",
    "Java language levels disagree",
    "source_compatibility, target_compatibility and jvm_target should "
    "agree so Java and Kotlin sources compile to the same bytecode level.",
    RuleCategory.COMPATIBILITY,
    Severity.WARNING,
)
def check_java_versions(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    options = ctx.project.compile_options
    declared = {
        name: value for name, value in (
            ("source_compatibility", options.source_compatibility),
            ("target_compatibility", options.target_compatibility),
            ("jvm_target", options.jvm_target),
        ) if value
    }
    if len(set(declared.values())) > 1:
        levels = ", ".join(f"{name}={value}" for name, value in declared.items())
        yield ("compile_options", f"Mismatched Java levels: {levels}")


@lint_rule(
    "PluginWithoutVersion",
    "Plugin declared without a version",
    "Unversioned plugins resolve to whatever the environment provides, "
    "which makes builds irreproducible.",
    RuleCategory.CORRECTNESS,
    Severity.WARNING,
)
def check_plugin_versions(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    for plugin in ctx.project.plugins:
        if not plugin.version:
            yield (f"plugins.{plugin.id}", f"Plugin {plugin.id} has no version")


@lint_rule(
    "GradleDynamicVersion",
    "Dependency uses a dynamic version",
    "Dynamic versions such as 1.+ change between builds without any "
    "change to the project description.",
    RuleCategory.DEPENDENCIES,
    Severity.WARNING,
    dependency_rule=True,
)
def check_dynamic_versions(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    for declaration in ctx.declarations:
        if Version(declaration.coordinate.version).is_dynamic:
            yield (
                f"dependencies.{declaration.configuration}",
                f"Avoid dynamic version in {declaration.coordinate}",
            )


@lint_rule(
    "GradleDependency",
    "Declared version is superseded",
    "Another declaration resolves this module to a higher version; the "
    "lower declaration is dead weight and misleading.",
    RuleCategory.DEPENDENCIES,
    Severity.WARNING,
    dependency_rule=True,
)
def check_superseded(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    reported = set()
    for declaration in ctx.declarations:
        resolved = ctx.resolved_version(declaration)
        if resolved is None or declaration.coordinate in reported:
            continue
        if Version(declaration.coordinate.version) < Version(resolved):
            reported.add(declaration.coordinate)
            yield (
                f"dependencies.{declaration.configuration}",
                f"{declaration.coordinate} is superseded by version {resolved}",
            )


@lint_rule(
    "UnusedDependencyOverride",
    "Dependency override matches nothing",
    "A dependency_overrides entry that names no declared module has no "
    "effect and usually indicates a typo.",
    RuleCategory.DEPENDENCIES,
    Severity.WARNING,
    dependency_rule=True,
)
def check_unused_overrides(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    declared = {d.coordinate.key for d in ctx.description.dependencies}
    for group, artifact in ctx.description.dependency_overrides:
        if (group, artifact) not in declared:
            yield ("dependency_overrides", f"Override for {group}:{artifact} matches no dependency")


@lint_rule(
    "DuplicateDependency",
    "Dependency declared more than once",
    "The same coordinate appears twice in one configuration.",
    RuleCategory.DEPENDENCIES,
    Severity.INFORMATIONAL,
    enabled_by_default=False,
    dependency_rule=True,
)
def check_duplicates(ctx: LintContext) -> Iterator[Tuple[str, str]]:
    seen = set()
    for declaration in ctx.declarations:
        marker = (declaration.configuration, declaration.coordinate)
        if marker in seen:
            yield (
                f"dependencies.{declaration.configuration}",
                f"{declaration.coordinate} is declared more than once",
            )
        seen.add(marker)
