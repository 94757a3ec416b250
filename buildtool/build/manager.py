"""
Main build manager that runs the resolution pipeline.

Loader -> Variant Resolver -> Dependency Graph Builder -> Policy Checker -> Reports
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from ..core.enums import DependencyScope
from ..core.errors import MalformedConfig
from ..core.models import BuildDescription
from ..config.config_loader import ConfigLoader
from ..config.config_serializer import ConfigSerializer
from ..config.global_config_loader import GlobalConfig
from ..lint.checker import PolicyChecker
from ..report.writers import write_reports
from ..resolve.dependency_resolver import DependencyGraphBuilder
from ..resolve.variant_resolver import VariantResolver
from .hasher import ConfigHasher
from .metadata import MetadataManager
from .models import BuildMetadata, BuildReport, ChangeType, VariantBuildResult


class BuildManager:
    """
    Main orchestrator for resolving and checking a project description.
    """

    def __init__(self, config_path: Path, global_config: Optional[GlobalConfig] = None):
        """
        Initialize build manager.

        Args:
            config_path: Path to the project description YAML
            global_config: Tool settings (defaults when omitted)
        """
        self.config_path = Path(config_path)
        self.global_config = global_config or GlobalConfig.default()
        self.build_dir = Path(self.global_config.build.build_dir)

        self.logger = logging.getLogger(__name__)

        self.hasher = ConfigHasher()
        self.metadata_manager = None
        if self.global_config.build.write_metadata:
            self.metadata_manager = MetadataManager(self.build_dir / "intermediates" / "buildtool")

    def load(self) -> BuildDescription:
        """Load the project description"""
        return ConfigLoader.load_from_yaml(str(self.config_path), build_dir=str(self.build_dir))

    def build(self, variants: Optional[Sequence[str]] = None) -> BuildReport:
        """
        Run the pipeline for the given variants (all declared variants when omitted).

        Returns:
            BuildReport with one result per variant

        Raises:
            MalformedConfig, CyclicVariantInheritance, UnresolvedConflict, PolicyViolation
        """
        self.logger.info(f"Starting build of {self.config_path}...")

        description = self.load()
        names = list(variants) if variants else description.variant_names()
        unknown = [name for name in names if name not in description.variants]
        if unknown:
            raise MalformedConfig(f"Unknown variant(s): {', '.join(unknown)}")

        variant_resolver = VariantResolver(description)
        graph_builder = DependencyGraphBuilder(description)
        checker = PolicyChecker(description.lint, min_sdk_floor=self.global_config.lint.min_sdk_floor)
        source_hash = self.hasher.compute_file_content_hash(str(self.config_path))

        report = BuildReport()
        for name in names:
            report.add(self._build_variant(
                description, name, variant_resolver, graph_builder, checker,
                source_hash=source_hash,
                per_variant_reports=len(names) > 1,
            ))

        if self.metadata_manager:
            report.orphaned = [
                name for name in self.metadata_manager.list_built_variants()
                if name not in description.variants
            ]
            if report.orphaned:
                self.logger.info(f"Metadata found for undeclared variants: {', '.join(report.orphaned)}")

        self.logger.info("Build complete")
        return report

    def _build_variant(
        self,
        description: BuildDescription,
        name: str,
        variant_resolver: VariantResolver,
        graph_builder: DependencyGraphBuilder,
        checker: PolicyChecker,
        source_hash: str,
        per_variant_reports: bool
    ) -> VariantBuildResult:
        self.logger.info(f"Building variant {name}...")

        variant = variant_resolver.resolve(name)
        dependencies = graph_builder.resolve_all_scopes(name)
        fingerprint = self.hasher.compute_fingerprint(description.project, variant, dependencies)

        lint_report = checker.check(description, variant, dependencies)
        written = write_reports(lint_report, description.lint, per_variant=per_variant_reports)
        # reports are written before enforce can raise
        checker.enforce(lint_report)

        change_type = self._detect_change(name, fingerprint)
        if self.metadata_manager:
            metadata = BuildMetadata(
                variant=name,
                fingerprint=fingerprint,
                source_path=str(self.config_path),
                built_at=datetime.now(timezone.utc).isoformat(),
                source_hash=source_hash,
                lint_counts=lint_report.counts(),
                runtime_classpath=[
                    str(dep.coordinate) for dep in dependencies[DependencyScope.RUNTIME_ONLY.value]
                ],
            )
            resolved = ConfigSerializer.resolved_build_to_dict(variant, dependencies)
            if not self.metadata_manager.save_metadata(metadata, resolved):
                self.logger.warning(f"Metadata for {name} was not saved; next build will report it as new")

        return VariantBuildResult(
            variant=name,
            fingerprint=fingerprint,
            change_type=change_type,
            lint=lint_report,
            reports={fmt.value: str(path) for fmt, path in written.items()},
        )

    def _detect_change(self, name: str, fingerprint: str) -> ChangeType:
        if not self.metadata_manager:
            return ChangeType.NEW
        previous = self.metadata_manager.load_metadata(name)
        if previous is None:
            return ChangeType.NEW
        if previous.fingerprint != fingerprint:
            self.logger.info(f"Variant {name} changed since last build")
            return ChangeType.MODIFIED
        return ChangeType.UNCHANGED
