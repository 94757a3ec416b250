"""
Resolves build variant inheritance (init_with chains).
"""
import logging
from typing import Dict, List, Optional, Tuple

from ..core.errors import CyclicVariantInheritance, MalformedConfig
from ..core.models import (
    BuildDescription, BuildVariant, ResolvedVariant,
    VARIANT_LIST_ATTRIBUTES, VARIANT_SCALAR_ATTRIBUTES
)

# Gradle's built-in defaults per build type name
_BASE_ATTRIBUTES = {
    'minify_enabled': False,
    'shrink_resources': False,
    'debuggable': False,
    'application_id_suffix': "",
    'version_name_suffix': "",
}
_NAMED_DEFAULTS = {
    'debug': {'debuggable': True},
}


class VariantGraph:
    """Variants as nodes of a DAG with edges child -> init_with parent"""

    def __init__(self, variants: Dict[str, BuildVariant]):
        self.variants = dict(variants)

    def parent_of(self, name: str) -> Optional[str]:
        return self._get(name).init_with

    def children_of(self, name: str) -> List[str]:
        self._get(name)
        return [v.name for v in self.variants.values() if v.init_with == name]

    def lineage(self, name: str) -> Tuple[str, ...]:
        """
        Walk the init_with chain from name to its root.

        Raises:
            CyclicVariantInheritance: If the chain revisits a variant
        """
        chain = []
        visited = set()
        current = name
        while current is not None:
            if current in visited:
                raise CyclicVariantInheritance(chain + [current])
            visited.add(current)
            chain.append(current)
            current = self._get(current).init_with
        return tuple(chain)

    def topological_order(self) -> List[str]:
        """Parents before children, otherwise declaration order"""
        ordered = []
        placed = set()
        for name in self.variants:
            for ancestor in reversed(self.lineage(name)):
                if ancestor not in placed:
                    placed.add(ancestor)
                    ordered.append(ancestor)
        return ordered

    def _get(self, name: str) -> BuildVariant:
        variant = self.variants.get(name)
        if variant is None:
            raise MalformedConfig(f"Unknown variant '{name}'")
        return variant


class VariantResolver:
    """Computes the effective attribute set of build variants"""

    def __init__(self, description: BuildDescription):
        self.description = description
        self.graph = VariantGraph(description.variants)
        self.logger = logging.getLogger(__name__)

    def resolve(self, name: str) -> ResolvedVariant:
        """
        Resolve a variant by applying its ancestors' overrides root first.

        Args:
            name: Variant name

        Returns:
            ResolvedVariant with every attribute populated
        """
        lineage = self.graph.lineage(name)
        root = lineage[-1]

        scalars = dict(_BASE_ATTRIBUTES)
        scalars.update(_NAMED_DEFAULTS.get(root, {}))
        lists: Dict[str, List[str]] = {key: [] for key in VARIANT_LIST_ATTRIBUTES}

        for variant_name in reversed(lineage):
            overrides = self.graph.variants[variant_name].overrides
            for key in VARIANT_SCALAR_ATTRIBUTES:
                value = getattr(overrides, key)
                if value is not None:
                    scalars[key] = value
            for key in VARIANT_LIST_ATTRIBUTES:
                for item in getattr(overrides, key):
                    if item not in lists[key]:
                        lists[key].append(item)

        resolved = ResolvedVariant(
            name=name,
            lineage=lineage,
            proguard_files=tuple(lists['proguard_files']),
            matching_fallbacks=tuple(lists['matching_fallbacks']),
            **scalars
        )
        self.logger.debug(f"Resolved variant {name} via {' -> '.join(lineage)}")
        return resolved

    def resolve_all(self) -> Dict[str, ResolvedVariant]:
        """Resolve every variant in declaration order"""
        # topological_order surfaces any cycle before partial results are built
        self.graph.topological_order()
        return {name: self.resolve(name) for name in self.description.variants}
