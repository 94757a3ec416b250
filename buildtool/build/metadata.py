"""
Manages metadata for built variants.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import yaml

from .models import BuildMetadata


class MetadataManager:
    """Manages reading/writing of per-variant build metadata"""

    def __init__(self, intermediates_dir: Path):
        """
        Initialize metadata manager.

        Args:
            intermediates_dir: Directory where metadata and resolved builds are stored
        """
        self.intermediates_dir = Path(intermediates_dir)
        self.logger = logging.getLogger(__name__)

        # Ensure directory exists
        self.intermediates_dir.mkdir(parents=True, exist_ok=True)

    def get_metadata_path(self, variant: str) -> Path:
        """Get path to metadata file for a variant"""
        return self.intermediates_dir / f"{variant}.meta.json"

    def get_resolved_path(self, variant: str) -> Path:
        """Get path to the resolved build dump"""
        return self.intermediates_dir / f"{variant}.resolved.yaml"

    def load_metadata(self, variant: str) -> Optional[BuildMetadata]:
        """
        Load metadata for a variant.

        Args:
            variant: Variant name

        Returns:
            BuildMetadata or None if not found or unreadable
        """
        metadata_path = self.get_metadata_path(variant)

        if not metadata_path.exists():
            return None

        try:
            with open(metadata_path, 'r') as f:
                data = json.load(f)

            return BuildMetadata.from_dict(data)

        except (OSError, ValueError, TypeError) as e:
            self.logger.error(f"Failed to load metadata for {variant}, treating as new build: {e}")
            return None

    def save_metadata(self, metadata: BuildMetadata, resolved: Dict[str, Any]) -> bool:
        """
        Save metadata and the resolved build for a variant.

        Args:
            metadata: BuildMetadata to save
            resolved: Resolved build as a plain dictionary

        Returns:
            True if successful
        """
        try:
            with open(self.get_resolved_path(metadata.variant), 'w') as f:
                yaml.safe_dump(resolved, f, default_flow_style=False, sort_keys=False)

            with open(self.get_metadata_path(metadata.variant), 'w') as f:
                json.dump(metadata.to_dict(), f, indent=2)

            return True

        except OSError as e:
            self.logger.error(f"Failed to save metadata for {metadata.variant}: {e}")
            return False

    def list_built_variants(self) -> List[str]:
        """
        List all variants that have metadata.

        Returns:
            List of variant names
        """
        return sorted(
            path.name[:-len(".meta.json")]
            for path in self.intermediates_dir.glob("*.meta.json")
        )
