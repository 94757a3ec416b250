from typing import Dict, Any, Iterable, Optional

from ..core.enums import ReportFormat
from ..core.models import (
    BuildDescription, BuildVariant, DependencyDeclaration, LintPolicy,
    ProjectConfig, ResolvedDependency, ResolvedVariant
)


class ConfigSerializer:
    """Utility class for serializing configuration objects"""

    @staticmethod
    def description_to_dict(description: BuildDescription) -> Dict[str, Any]:
        """Convert BuildDescription back to the dictionary shape ConfigLoader reads"""
        result = {
            'project': ConfigSerializer.project_to_dict(description.project),
            'build_types': {
                name: ConfigSerializer._variant_to_dict(variant)
                for name, variant in description.variants.items()
            },
            'dependencies': [ConfigSerializer._declaration_to_dict(d) for d in description.dependencies],
            'lint': ConfigSerializer._lint_to_dict(description.lint),
        }

        plugins = description.project.plugins
        if plugins:
            result['plugins'] = [
                {'id': p.id, 'version': p.version, 'apply': p.apply} if p.version else {'id': p.id, 'apply': p.apply}
                for p in plugins
            ]

        options = description.project.compile_options
        compile_options = {
            key: getattr(options, key)
            for key in ('source_compatibility', 'target_compatibility', 'jvm_target')
            if getattr(options, key) is not None
        }
        if compile_options:
            result['compile_options'] = compile_options

        if description.dependency_overrides:
            result['dependency_overrides'] = {
                f"{group}:{artifact}": version
                for (group, artifact), version in sorted(description.dependency_overrides.items())
            }

        return result

    @staticmethod
    def project_to_dict(project: ProjectConfig) -> Dict[str, Any]:
        result = {
            'namespace': project.namespace,
            'application_id': project.application_id,
            'min_sdk': project.min_sdk,
            'target_sdk': project.target_sdk,
            'compile_sdk': project.compile_sdk,
            'version_code': project.version_code,
            'version_name': project.version_name,
        }

        # Only include non-default values
        if project.test_instrumentation_runner:
            result['test_instrumentation_runner'] = project.test_instrumentation_runner
        if project.build_features:
            result['build_features'] = dict(project.build_features)

        return result

    @staticmethod
    def _variant_to_dict(variant: BuildVariant) -> Dict[str, Any]:
        result = variant.overrides.to_dict()
        if variant.init_with:
            result = {'init_with': variant.init_with, **result}
        return result

    @staticmethod
    def _declaration_to_dict(declaration: DependencyDeclaration) -> Dict[str, str]:
        return {declaration.configuration: str(declaration.coordinate)}

    @staticmethod
    def _lint_to_dict(policy: LintPolicy) -> Dict[str, Any]:
        result = {
            'abort_on_error': policy.abort_on_error,
            'warnings_as_errors': policy.warnings_as_errors,
            'check_release_builds': policy.check_release_builds,
            'check_dependencies': policy.check_dependencies,
            'explain_issues': policy.explain_issues,
            'absolute_paths': policy.absolute_paths,
        }
        if policy.enable:
            result['enable'] = sorted(policy.enable)
        if policy.disable:
            result['disable'] = sorted(policy.disable)

        by_severity: Dict[str, list] = {}
        for rule_id, severity in sorted(policy.severity_overrides.items()):
            by_severity.setdefault(severity.value, []).append(rule_id)
        result.update(by_severity)

        for report_format in ReportFormat:
            result[f"{report_format.value}_report"] = getattr(policy, f"{report_format.value}_report")
            result[f"{report_format.value}_output"] = getattr(policy, f"{report_format.value}_output")
        return result

    @staticmethod
    def resolved_build_to_dict(
        variant: ResolvedVariant,
        dependencies: Optional[Dict[str, Iterable[ResolvedDependency]]] = None
    ) -> Dict[str, Any]:
        """Convert a resolved variant and its classpaths to a plain dictionary"""
        result = {'variant': variant.to_dict()}
        if dependencies is not None:
            result['dependencies'] = {
                scope: [dep.to_dict() for dep in resolved]
                for scope, resolved in dependencies.items()
            }
        return result
