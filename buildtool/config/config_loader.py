import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..core.enums import DependencyScope, Severity
from ..core.errors import MalformedConfig
from ..core.models import (
    BuildDescription, BuildVariant, CompileOptions, Coordinate,
    DependencyDeclaration, LintPolicy, PluginDeclaration, ProjectConfig,
    VariantAttributes, VARIANT_LIST_ATTRIBUTES, VARIANT_SCALAR_ATTRIBUTES
)

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")

# Gradle always creates these two build types
IMPLICIT_VARIANTS = ("debug", "release")

_BOOL_VARIANT_KEYS = ("minify_enabled", "shrink_resources", "debuggable")
_VARIANT_KEYS = {"init_with"} | set(VARIANT_SCALAR_ATTRIBUTES) | set(VARIANT_LIST_ATTRIBUTES)

_LINT_FLAGS = (
    "abort_on_error", "warnings_as_errors", "check_release_builds",
    "check_dependencies", "explain_issues", "absolute_paths",
    "html_report", "xml_report", "sarif_report", "text_report",
)
_LINT_OUTPUTS = {
    "html_output": "lint-results.html",
    "xml_output": "lint-results.xml",
    "sarif_output": "lint-results.sarif",
    "text_output": "lint-results.txt",
}
_LINT_RULE_SETS = ("enable", "disable") + tuple(s.value for s in Severity)


class ConfigLoader:
    """Load and validate project descriptions"""

    @staticmethod
    def load_from_yaml(file_path: str, build_dir: str = "./build") -> BuildDescription:
        """Load a project description from a YAML file"""
        try:
            with open(file_path, 'r') as file:
                config_dict = yaml.safe_load(file)
        except FileNotFoundError:
            raise MalformedConfig(f"Config file not found: {file_path}")
        except yaml.YAMLError as e:
            raise MalformedConfig(f"Invalid YAML in {file_path}: {e}")

        if config_dict is None:
            raise MalformedConfig(f"Empty or invalid YAML file: {file_path}")

        return ConfigLoader.load_from_dict(config_dict, source_path=str(file_path), build_dir=build_dir)

    @staticmethod
    def load_from_dict(
        config_dict: Dict[str, Any],
        source_path: Optional[str] = None,
        build_dir: str = "./build"
    ) -> BuildDescription:
        """Load a project description from a dictionary"""
        if not isinstance(config_dict, dict):
            raise MalformedConfig("Top level of a project description must be a mapping")

        processed_config = ConfigLoader._resolve_placeholders(config_dict, {'build_dir': str(build_dir)})

        project = ConfigLoader._process_project(
            processed_config.get('project'),
            processed_config.get('plugins') or [],
            processed_config.get('compile_options') or {},
        )
        variants = ConfigLoader._process_variants(processed_config.get('build_types'))
        dependencies = ConfigLoader._process_dependencies(
            processed_config.get('dependencies') or [],
            variants
        )
        overrides = ConfigLoader._process_overrides(processed_config.get('dependency_overrides') or {})
        lint = ConfigLoader._process_lint(processed_config.get('lint') or {}, str(build_dir))

        description = BuildDescription(
            project=project,
            variants=variants,
            dependencies=dependencies,
            dependency_overrides=overrides,
            lint=lint,
            source_path=source_path,
        )
        logger.debug(
            f"Loaded project {project.namespace}: {len(variants)} variants, "
            f"{len(dependencies)} dependency declarations"
        )
        return description

    @staticmethod
    def _resolve_placeholders(value: Any, variables: Dict[str, str]) -> Any:
        """Substitute ${VAR} and ${VAR:default} from variables, then the environment"""
        if isinstance(value, str):
            def substitute(match):
                name, default = match.group(1), match.group(2)
                if name in variables:
                    return variables[name]
                env_value = os.getenv(name)
                if env_value is not None:
                    return env_value
                if default is not None:
                    return default
                raise MalformedConfig(f"Unresolved placeholder ${{{name}}} in {value!r}")
            return _PLACEHOLDER.sub(substitute, value)
        elif isinstance(value, dict):
            return {k: ConfigLoader._resolve_placeholders(v, variables) for k, v in value.items()}
        elif isinstance(value, list):
            return [ConfigLoader._resolve_placeholders(item, variables) for item in value]
        return value

    @staticmethod
    def _process_project(
        project_dict: Any,
        plugins_data: List[Any],
        compile_options_dict: Dict[str, Any]
    ) -> ProjectConfig:
        if not isinstance(project_dict, dict):
            raise MalformedConfig("project section is required", field="project")

        namespace = project_dict.get('namespace')
        if not isinstance(namespace, str) or not namespace.strip():
            raise MalformedConfig("is required", field="project.namespace")

        build_features = project_dict.get('build_features') or {}
        if not isinstance(build_features, dict):
            raise MalformedConfig("must be a mapping", field="project.build_features")

        return ProjectConfig(
            namespace=namespace.strip(),
            min_sdk=ConfigLoader._require_int(project_dict, 'min_sdk'),
            target_sdk=ConfigLoader._require_int(project_dict, 'target_sdk'),
            compile_sdk=ConfigLoader._require_int(project_dict, 'compile_sdk'),
            version_code=ConfigLoader._require_int(project_dict, 'version_code', default=1),
            version_name=str(project_dict.get('version_name', "1.0")),
            application_id=project_dict.get('application_id'),
            test_instrumentation_runner=project_dict.get('test_instrumentation_runner'),
            build_features={
                name: ConfigLoader._as_bool(enabled, f"project.build_features.{name}")
                for name, enabled in build_features.items()
            },
            compile_options=ConfigLoader._process_compile_options(compile_options_dict),
            plugins=ConfigLoader._process_plugins(plugins_data),
        )

    @staticmethod
    def _require_int(section: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
        value = section.get(key, default)
        if value is None:
            raise MalformedConfig("is required", field=f"project.{key}")
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedConfig(f"must be an integer, got {value!r}", field=f"project.{key}")
        return value

    @staticmethod
    def _as_bool(value: Any, field: str) -> bool:
        if not isinstance(value, bool):
            raise MalformedConfig(f"must be true or false, got {value!r}", field=field)
        return value

    @staticmethod
    def _as_str_list(value: Any, field: str) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise MalformedConfig(f"must be a list of strings, got {value!r}", field=field)
        return list(value)

    @staticmethod
    def _as_version(value: Any, field: str) -> str:
        # an unquoted 1.10 reaches us as the float 1.1
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise MalformedConfig(f"must be a string, quote the version: got {value!r}", field=field)
        value = str(value).strip()
        if not value:
            raise MalformedConfig("must not be empty", field=field)
        return value

    @staticmethod
    def _process_compile_options(options: Dict[str, Any]) -> CompileOptions:
        if not isinstance(options, dict):
            raise MalformedConfig("must be a mapping", field="compile_options")
        unknown = set(options) - {'source_compatibility', 'target_compatibility', 'jvm_target'}
        if unknown:
            raise MalformedConfig(f"unknown keys {sorted(unknown)}", field="compile_options")
        return CompileOptions(**{
            k: ConfigLoader._as_version(v, f"compile_options.{k}") for k, v in options.items() if v is not None
        })

    @staticmethod
    def _process_plugins(plugins_data: List[Any]) -> Tuple[PluginDeclaration, ...]:
        if not isinstance(plugins_data, list):
            raise MalformedConfig("must be a list", field="plugins")

        plugins = []
        seen = set()
        for entry in plugins_data:
            if isinstance(entry, str):
                entry = {'id': entry}
            if not isinstance(entry, dict) or not entry.get('id'):
                raise MalformedConfig(f"each plugin needs an id, got {entry!r}", field="plugins")
            plugin_id = str(entry['id'])
            if plugin_id in seen:
                raise MalformedConfig(f"duplicate plugin {plugin_id}", field="plugins")
            seen.add(plugin_id)
            version = entry.get('version')
            plugins.append(PluginDeclaration(
                id=plugin_id,
                version=ConfigLoader._as_version(version, f"plugins.{plugin_id}.version") if version is not None else None,
                apply=ConfigLoader._as_bool(entry.get('apply', True), f"plugins.{plugin_id}.apply"),
            ))
        return tuple(plugins)

    @staticmethod
    def _process_variants(build_types: Any) -> Dict[str, BuildVariant]:
        """Process build_types into variants, keeping declaration order"""
        if build_types is None:
            build_types = {}
        if not isinstance(build_types, dict):
            raise MalformedConfig("must be a mapping of variant name to attributes", field="build_types")

        declared = {name: None for name in IMPLICIT_VARIANTS}
        declared.update(build_types)

        variants = {}
        for name, attributes in declared.items():
            if not isinstance(name, str) or not name:
                raise MalformedConfig(f"invalid variant name {name!r}", field="build_types")
            attributes = attributes or {}
            if not isinstance(attributes, dict):
                raise MalformedConfig("must be a mapping", field=f"build_types.{name}")

            unknown = set(attributes) - _VARIANT_KEYS
            if unknown:
                raise MalformedConfig(f"unknown attributes {sorted(unknown)}", field=f"build_types.{name}")

            overrides = {}
            for key in _BOOL_VARIANT_KEYS:
                if attributes.get(key) is not None:
                    overrides[key] = ConfigLoader._as_bool(attributes[key], f"build_types.{name}.{key}")
            for key in ("application_id_suffix", "version_name_suffix"):
                if attributes.get(key) is not None:
                    overrides[key] = str(attributes[key])
            for key in VARIANT_LIST_ATTRIBUTES:
                overrides[key] = tuple(ConfigLoader._as_str_list(attributes.get(key), f"build_types.{name}.{key}"))

            init_with = attributes.get('init_with')
            if init_with is not None and (not isinstance(init_with, str) or not init_with):
                raise MalformedConfig(
                    f"must be the name of another variant, got {init_with!r}",
                    field=f"build_types.{name}.init_with"
                )

            variants[name] = BuildVariant(
                name=name,
                init_with=init_with,
                overrides=VariantAttributes(**overrides),
            )

        for variant in variants.values():
            if variant.init_with is not None and variant.init_with not in variants:
                raise MalformedConfig(
                    f"init_with references unknown variant '{variant.init_with}'",
                    field=f"build_types.{variant.name}"
                )
        return variants

    @staticmethod
    def _parse_configuration(name: str, variant_names) -> Tuple[DependencyScope, Optional[str]]:
        """Split a Gradle configuration name like debugImplementation into scope and variant"""
        try:
            return DependencyScope(name), None
        except ValueError:
            pass
        for scope in DependencyScope:
            suffix = scope.value[0].upper() + scope.value[1:]
            if name.endswith(suffix):
                prefix = name[:-len(suffix)]
                if prefix in variant_names:
                    return scope, prefix
        raise MalformedConfig(f"unknown dependency configuration '{name}'", field="dependencies")

    @staticmethod
    def _process_dependencies(
        dependencies_data: List[Any],
        variants: Dict[str, BuildVariant]
    ) -> Tuple[DependencyDeclaration, ...]:
        if not isinstance(dependencies_data, list):
            raise MalformedConfig("must be a list", field="dependencies")

        declarations = []
        for entry in dependencies_data:
            if not isinstance(entry, dict):
                raise MalformedConfig(f"invalid dependency entry {entry!r}", field="dependencies")

            if 'scope' in entry:
                # long form: scope + group/artifact/version
                scope, variant = ConfigLoader._parse_configuration(str(entry['scope']), variants)
                missing = [k for k in ('group', 'artifact', 'version') if not entry.get(k)]
                if missing:
                    raise MalformedConfig(f"dependency entry missing {missing}", field="dependencies")
                coordinate = Coordinate(
                    str(entry['group']),
                    str(entry['artifact']),
                    ConfigLoader._as_version(entry['version'], "dependencies.version"),
                )
            elif len(entry) == 1:
                configuration, notation = next(iter(entry.items()))
                scope, variant = ConfigLoader._parse_configuration(str(configuration), variants)
                coordinate = Coordinate.parse(notation)
            else:
                raise MalformedConfig(f"invalid dependency entry {entry!r}", field="dependencies")

            declarations.append(DependencyDeclaration(scope=scope, coordinate=coordinate, variant=variant))
        return tuple(declarations)

    @staticmethod
    def _process_overrides(overrides_data: Any) -> Dict[Tuple[str, str], str]:
        if not isinstance(overrides_data, dict):
            raise MalformedConfig("must be a mapping of group:artifact to version", field="dependency_overrides")

        overrides = {}
        for module, version in overrides_data.items():
            parts = str(module).split(":")
            if len(parts) != 2 or not all(parts) or version is None:
                raise MalformedConfig(
                    f"expected 'group:artifact: version', got {module!r}: {version!r}",
                    field="dependency_overrides"
                )
            overrides[(parts[0], parts[1])] = ConfigLoader._as_version(version, f"dependency_overrides.{module}")
        return overrides

    @staticmethod
    def _process_lint(lint_dict: Dict[str, Any], build_dir: str) -> LintPolicy:
        if not isinstance(lint_dict, dict):
            raise MalformedConfig("must be a mapping", field="lint")

        known = set(_LINT_FLAGS) | set(_LINT_OUTPUTS) | set(_LINT_RULE_SETS)
        for key in lint_dict:
            if key not in known:
                logger.warning(f"Ignoring unknown lint option: {key}")

        options = {}
        for key in _LINT_FLAGS:
            if key in lint_dict:
                options[key] = ConfigLoader._as_bool(lint_dict[key], f"lint.{key}")

        reports_dir = f"{build_dir.rstrip('/')}/reports/lint"
        for key, file_name in _LINT_OUTPUTS.items():
            options[key] = str(lint_dict.get(key) or f"{reports_dir}/{file_name}")

        severity_overrides = {}
        for severity in Severity:
            for rule_id in ConfigLoader._as_str_list(lint_dict.get(severity.value), f"lint.{severity.value}"):
                previous = severity_overrides.get(rule_id)
                if previous is not None and previous != severity:
                    raise MalformedConfig(
                        f"rule {rule_id} is listed as both {previous.value} and {severity.value}",
                        field="lint"
                    )
                severity_overrides[rule_id] = severity

        return LintPolicy(
            enable=ConfigLoader._as_str_list(lint_dict.get('enable'), "lint.enable"),
            disable=ConfigLoader._as_str_list(lint_dict.get('disable'), "lint.disable"),
            severity_overrides=severity_overrides,
            **options
        )
