"""
Flattens dependency declarations into one resolved version per module.
"""
import logging
from collections import OrderedDict
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from ..core.enums import DependencyScope, ResolutionReason
from ..core.errors import MalformedConfig, UnresolvedConflict
from ..core.models import BuildDescription, Coordinate, DependencyDeclaration, ResolvedDependency
from .version import Version

_BASE = frozenset({DependencyScope.IMPLEMENTATION, DependencyScope.API})

# configurations visible when resolving a given scope
REACHABLE_SCOPES: Dict[DependencyScope, FrozenSet[DependencyScope]] = {
    DependencyScope.API: frozenset({DependencyScope.API}),
    DependencyScope.IMPLEMENTATION: _BASE,
    DependencyScope.COMPILE_ONLY: _BASE | {DependencyScope.COMPILE_ONLY},
    DependencyScope.RUNTIME_ONLY: _BASE | {DependencyScope.RUNTIME_ONLY},
    DependencyScope.TEST: _BASE | {DependencyScope.TEST},
    DependencyScope.ANDROID_TEST: _BASE | {DependencyScope.ANDROID_TEST},
}


class DependencyGraphBuilder:
    """Resolves declared coordinates into a flat, deduplicated set per scope"""

    def __init__(self, description: BuildDescription):
        self.description = description
        self.overrides = description.dependency_overrides
        self.logger = logging.getLogger(__name__)

    def collect(
        self,
        scope: Union[DependencyScope, str],
        variant: Optional[str] = None
    ) -> List[DependencyDeclaration]:
        """Declarations reachable from scope, including those specific to variant"""
        scope = self._as_scope(scope)
        if variant is not None and variant not in self.description.variants:
            raise MalformedConfig(f"Unknown variant '{variant}'")

        reachable = REACHABLE_SCOPES[scope]
        return [
            declaration for declaration in self.description.dependencies
            if declaration.scope in reachable
            and (declaration.variant is None or declaration.variant == variant)
        ]

    def resolve(
        self,
        scope: Union[DependencyScope, str],
        variant: Optional[str] = None
    ) -> Tuple[ResolvedDependency, ...]:
        """
        Resolve declarations for a scope.

        Args:
            scope: Configuration to resolve, e.g. implementation or testImplementation
            variant: Include variant-specific declarations for this variant

        Returns:
            Resolved dependencies sorted by coordinate

        Raises:
            UnresolvedConflict: If different major versions are declared without an override
        """
        grouped: Dict[Tuple[str, str], List[str]] = OrderedDict()
        for declaration in self.collect(scope, variant):
            versions = grouped.setdefault(declaration.coordinate.key, [])
            if declaration.coordinate.version not in versions:
                versions.append(declaration.coordinate.version)

        resolved = [self._select(key, versions) for key, versions in grouped.items()]
        resolved.sort(key=lambda dep: dep.coordinate.key)

        self.logger.debug(
            f"Resolved {len(resolved)} modules for scope {self._as_scope(scope).value}"
            + (f" (variant {variant})" if variant else "")
        )
        return tuple(resolved)

    def resolve_all_scopes(self, variant: Optional[str] = None) -> Dict[str, Tuple[ResolvedDependency, ...]]:
        """Resolve every scope; keys are scope names"""
        return {scope.value: self.resolve(scope, variant) for scope in DependencyScope}

    def _select(self, key: Tuple[str, str], versions: List[str]) -> ResolvedDependency:
        requested = tuple(versions)
        pinned = self.overrides.get(key)
        if pinned is not None:
            return ResolvedDependency(Coordinate(key[0], key[1], pinned), requested, ResolutionReason.OVERRIDE)

        if len(versions) == 1:
            return ResolvedDependency(Coordinate(key[0], key[1], versions[0]), requested, ResolutionReason.SINGLE)

        parsed = [Version(v) for v in versions]
        majors = {v.major for v in parsed}
        if len(majors) > 1:
            raise UnresolvedConflict(key, versions)

        highest = max(parsed)
        self.logger.info(
            f"Conflict on {key[0]}:{key[1]} resolved to {highest} (requested {', '.join(versions)})"
        )
        return ResolvedDependency(Coordinate(key[0], key[1], highest.text), requested, ResolutionReason.HIGHEST)

    @staticmethod
    def _as_scope(scope: Union[DependencyScope, str]) -> DependencyScope:
        if isinstance(scope, DependencyScope):
            return scope
        try:
            return DependencyScope(scope)
        except ValueError:
            valid = ', '.join(s.value for s in DependencyScope)
            raise MalformedConfig(f"Unknown dependency scope '{scope}' (expected one of: {valid})")
