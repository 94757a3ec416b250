"""
buildtool - declarative build configuration resolver

Main modules:
- core: Data model, enums and the error taxonomy
- config: Project description loading and tool settings
- resolve: Variant inheritance and dependency resolution
- lint: Policy rules and the policy checker
- report: HTML, XML, SARIF and text report writers
- build: Pipeline orchestration and build fingerprints
"""

__version__ = "1.0.0"

from .core.errors import (
    BuildConfigError,
    CyclicVariantInheritance,
    MalformedConfig,
    PolicyViolation,
    UnresolvedConflict,
)
from .config.config_loader import ConfigLoader
from .resolve.variant_resolver import VariantResolver
from .resolve.dependency_resolver import DependencyGraphBuilder
from .lint.checker import PolicyChecker
from .build.manager import BuildManager

__all__ = [
    'BuildConfigError',
    'CyclicVariantInheritance',
    'MalformedConfig',
    'PolicyViolation',
    'UnresolvedConflict',
    'ConfigLoader',
    'VariantResolver',
    'DependencyGraphBuilder',
    'PolicyChecker',
    'BuildManager',
]
