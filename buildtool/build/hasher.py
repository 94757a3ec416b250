"""
Canonical fingerprints for resolved builds.
Hashes parsed objects so formatting and comments in the YAML do not matter.
"""
import hashlib
import json
from typing import Dict, Iterable
import logging

from ..core.models import ProjectConfig, ResolvedDependency, ResolvedVariant
from ..config.config_serializer import ConfigSerializer


class ConfigHasher:
    """Computes canonical hashes for resolved builds"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def compute_fingerprint(
        self,
        project: ProjectConfig,
        variant: ResolvedVariant,
        dependencies: Dict[str, Iterable[ResolvedDependency]]
    ) -> str:
        """
        Compute the fingerprint of one resolved variant.

        Args:
            project: Project configuration
            variant: Resolved variant
            dependencies: Resolved dependencies keyed by scope

        Returns:
            SHA256 hash hex string
        """
        build_dict = ConfigSerializer.resolved_build_to_dict(variant, dependencies)
        build_dict['project'] = ConfigSerializer.project_to_dict(project)

        # Create canonical JSON (sorted keys, no whitespace)
        canonical_json = json.dumps(
            build_dict,
            sort_keys=True,
            separators=(',', ':'),
            default=str
        )

        fingerprint = hashlib.sha256(canonical_json.encode('utf-8')).hexdigest()
        self.logger.debug(f"Fingerprint for {variant.name}: {fingerprint}")
        return fingerprint

    def compute_file_content_hash(self, file_path: str) -> str:
        """
        Compute hash of raw file content.

        Args:
            file_path: Path to file

        Returns:
            SHA256 hash hex string
        """
        with open(file_path, 'rb') as f:
            content = f.read()

        return hashlib.sha256(content).hexdigest()
