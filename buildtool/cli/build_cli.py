#!/usr/bin/env python3
"""
CLI tool for resolving, checking and building project descriptions
"""

import click
import logging
import sys
from typing import Optional, Sequence

import yaml

from ..build.manager import BuildManager
from ..config.config_loader import ConfigLoader
from ..config.config_serializer import ConfigSerializer
from ..config.global_config_loader import GlobalConfig, load_global_config
from ..core.enums import DependencyScope
from ..core.errors import BuildConfigError, PolicyViolation
from ..lint.checker import PolicyChecker
from ..report.writers import render_text, write_reports
from ..resolve.dependency_resolver import DependencyGraphBuilder
from ..resolve.variant_resolver import VariantResolver


class BuildCLI:
    """Command-line interface for build configuration"""

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        self.logger = logging.getLogger(__name__)

    def _load(self, config_path: str):
        return ConfigLoader.load_from_yaml(config_path, build_dir=self.global_config.build.build_dir)

    def validate(self, config_path: str, output_path: Optional[str] = None) -> int:
        """Load a project description and report what it declares"""
        try:
            description = self._load(config_path)
            # cycles are only found by walking the inheritance graph
            VariantResolver(description).resolve_all()
        except BuildConfigError as e:
            click.echo(f"Invalid configuration: {e}", err=True)
            return 1

        project = description.project
        click.echo(f"Project: {project.namespace} ({project.application_id})")
        click.echo(f"  SDK: min {project.min_sdk}, target {project.target_sdk}, compile {project.compile_sdk}")
        click.echo(f"  Version: {project.version_name} ({project.version_code})")
        if project.plugins:
            click.echo(f"  Plugins: {', '.join(p.id for p in project.applied_plugins())}")
        click.echo(f"  Variants: {', '.join(description.variant_names())}")
        click.echo(f"  Dependencies: {len(description.dependencies)} declarations")

        if output_path:
            with open(output_path, 'w') as f:
                yaml.safe_dump(ConfigSerializer.description_to_dict(description), f,
                               default_flow_style=False, sort_keys=False)
            click.echo(f"Wrote normalized configuration to {output_path}")
        return 0

    def show_variants(self, config_path: str, variant: Optional[str] = None) -> int:
        """Print resolved variant attributes"""
        try:
            description = self._load(config_path)
            resolver = VariantResolver(description)
            resolved = [resolver.resolve(variant)] if variant else list(resolver.resolve_all().values())
        except BuildConfigError as e:
            click.echo(f"Error resolving variants: {e}", err=True)
            return 1

        for item in resolved:
            click.echo(f"\nVariant: {item.name}")
            click.echo("-" * (len(item.name) + 9))
            if item.parent:
                click.echo(f"  Inherits: {' -> '.join(item.lineage[1:])}")
            click.echo(f"  debuggable: {item.debuggable}")
            click.echo(f"  minify_enabled: {item.minify_enabled}")
            click.echo(f"  shrink_resources: {item.shrink_resources}")
            if item.proguard_files:
                click.echo(f"  proguard_files: {', '.join(item.proguard_files)}")
            if item.matching_fallbacks:
                click.echo(f"  matching_fallbacks: {', '.join(item.matching_fallbacks)}")
            if item.application_id_suffix:
                click.echo(f"  application_id_suffix: {item.application_id_suffix}")
            if item.version_name_suffix:
                click.echo(f"  version_name_suffix: {item.version_name_suffix}")
        return 0

    def show_dependencies(self, config_path: str, scope: str, variant: Optional[str] = None) -> int:
        """Print the flat dependency set for a scope"""
        try:
            description = self._load(config_path)
            resolved = DependencyGraphBuilder(description).resolve(scope, variant)
        except BuildConfigError as e:
            click.echo(f"Error resolving dependencies: {e}", err=True)
            return 1

        if not resolved:
            click.echo(f"No dependencies for scope {scope}")
            return 0

        for dependency in resolved:
            line = f"{dependency.coordinate}"
            if len(dependency.requested) > 1 or dependency.reason.value == "override":
                line += f" ({dependency.reason.value}; requested {', '.join(dependency.requested)})"
            click.echo(line)
        return 0

    def lint(self, config_path: str, variants: Sequence[str] = ()) -> int:
        """Check variants, write reports, fail on errors when abort_on_error is set"""
        try:
            description = self._load(config_path)
            resolver = VariantResolver(description)
            graph_builder = DependencyGraphBuilder(description)
            checker = PolicyChecker(description.lint, min_sdk_floor=self.global_config.lint.min_sdk_floor)

            names = list(variants) or description.variant_names()
            reports = []
            for name in names:
                resolved = resolver.resolve(name)
                report = checker.check(description, resolved, graph_builder.resolve_all_scopes(name))
                write_reports(report, description.lint, per_variant=len(names) > 1)
                click.echo(render_text(report, absolute_paths=description.lint.absolute_paths), nl=False)
                reports.append(report)

            for report in reports:
                checker.enforce(report)
        except PolicyViolation as e:
            click.echo(f"Lint failed: {e}", err=True)
            return 1
        except BuildConfigError as e:
            click.echo(f"Invalid configuration: {e}", err=True)
            return 1
        return 0

    def build(self, config_path: str, variants: Sequence[str] = ()) -> int:
        """Run the full pipeline and print the build report"""
        manager = BuildManager(config_path, self.global_config)
        try:
            report = manager.build(list(variants) or None)
        except BuildConfigError as e:
            click.echo(f"Build failed: {e}", err=True)
            return 1

        report.print_summary()
        return 0


@click.group()
@click.option('--global-config', default=None, help='Path to buildtool.yaml')
@click.option('--build-dir', default=None, help='Override the build output directory')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level')
@click.pass_context
def cli(ctx, global_config, build_dir, log_level):
    """Build configuration resolver - variants, dependencies and lint"""
    if global_config:
        global_cfg = load_global_config(global_config)
    else:
        global_cfg = load_global_config()

    if build_dir:
        global_cfg.build.build_dir = build_dir

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, (log_level or global_cfg.logging.level).upper()),
        format=global_cfg.logging.format,
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    ctx.ensure_object(dict)
    ctx.obj['global_config'] = global_cfg
    ctx.obj['cli'] = BuildCLI(global_cfg)


@cli.command()
@click.argument('config_path')
@click.option('--output', help='Write the normalized configuration to this YAML file')
@click.pass_context
def validate(ctx, config_path, output):
    """Validate a project description"""
    sys.exit(ctx.obj['cli'].validate(config_path, output))


@cli.command()
@click.argument('config_path')
@click.option('--variant', help='Only resolve this variant')
@click.pass_context
def variants(ctx, config_path, variant):
    """Show resolved build variants"""
    sys.exit(ctx.obj['cli'].show_variants(config_path, variant))


@cli.command()
@click.argument('config_path')
@click.option('--scope', default=DependencyScope.IMPLEMENTATION.value,
              type=click.Choice([s.value for s in DependencyScope]),
              help='Dependency scope to resolve')
@click.option('--variant', help='Include dependencies declared for this variant')
@click.pass_context
def deps(ctx, config_path, scope, variant):
    """Show the resolved dependency set"""
    sys.exit(ctx.obj['cli'].show_dependencies(config_path, scope, variant))


@cli.command()
@click.argument('config_path')
@click.option('--variant', 'variant_names', multiple=True, help='Variant to check (repeatable)')
@click.pass_context
def lint(ctx, config_path, variant_names):
    """Run lint and write reports"""
    sys.exit(ctx.obj['cli'].lint(config_path, variant_names))


@cli.command()
@click.argument('config_path')
@click.option('--variant', 'variant_names', multiple=True, help='Variant to build (repeatable)')
@click.pass_context
def build(ctx, config_path, variant_names):
    """Resolve, lint and fingerprint variants"""
    sys.exit(ctx.obj['cli'].build(config_path, variant_names))


if __name__ == "__main__":
    cli()
