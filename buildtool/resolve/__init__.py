"""
Variant and dependency resolution.
"""

from .version import Version
from .variant_resolver import VariantGraph, VariantResolver
from .dependency_resolver import DependencyGraphBuilder, REACHABLE_SCOPES

__all__ = [
    'Version',
    'VariantGraph',
    'VariantResolver',
    'DependencyGraphBuilder',
    'REACHABLE_SCOPES',
]
