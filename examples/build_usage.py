#!/usr/bin/env python3
"""
Example usage of the buildtool pipeline on the demo app configuration:
resolve variants, flatten dependencies, lint and build.
"""

import logging
from pathlib import Path

from buildtool.build.manager import BuildManager
from buildtool.config.config_loader import ConfigLoader
from buildtool.config.global_config_loader import GlobalConfig
from buildtool.core.errors import BuildConfigError
from buildtool.lint.checker import PolicyChecker
from buildtool.resolve.dependency_resolver import DependencyGraphBuilder
from buildtool.resolve.variant_resolver import VariantResolver

CONFIG_PATH = Path(__file__).parent / "configs" / "app.yaml"


def resolve_example():
    """Resolve each variant and its runtime classpath"""
    print("\n=== Resolve Example ===")

    description = ConfigLoader.load_from_yaml(str(CONFIG_PATH))
    resolver = VariantResolver(description)
    graph_builder = DependencyGraphBuilder(description)

    for name, variant in resolver.resolve_all().items():
        print(f"{name}: debuggable={variant.debuggable} minify={variant.minify_enabled} "
              f"lineage={' -> '.join(variant.lineage)}")

    for dependency in graph_builder.resolve("runtimeOnly"):
        print(f"  {dependency.coordinate} ({dependency.reason.value})")


def lint_example():
    """Lint the release variant without writing reports"""
    print("\n=== Lint Example ===")

    description = ConfigLoader.load_from_yaml(str(CONFIG_PATH))
    release = VariantResolver(description).resolve("release")
    dependencies = DependencyGraphBuilder(description).resolve_all_scopes("release")

    report = PolicyChecker(description.lint).check(description, release, dependencies)
    for finding in report.findings:
        print(f"  [{finding.severity.value}] {finding.rule_id}: {finding.message}")
    print(f"  Counts: {report.counts()}")


def build_example():
    """Run the full pipeline into ./build"""
    print("\n=== Build Example ===")

    manager = BuildManager(CONFIG_PATH, GlobalConfig.default())
    try:
        report = manager.build()
    except BuildConfigError as e:
        print(f"Build failed: {e}")
        return
    report.print_summary()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    resolve_example()
    lint_example()
    build_example()
