"""
Build orchestration: runs the resolution pipeline per variant,
fingerprints the result and tracks changes between builds.
"""

from .models import (
    BuildMetadata,
    BuildReport,
    ChangeType,
    VariantBuildResult
)
from .hasher import ConfigHasher
from .metadata import MetadataManager
from .manager import BuildManager

__all__ = [
    'BuildMetadata',
    'BuildReport',
    'ChangeType',
    'VariantBuildResult',
    'ConfigHasher',
    'MetadataManager',
    'BuildManager',
]
