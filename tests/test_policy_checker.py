"""
Tests for lint rule selection, severities and the built-in rules.
"""
import json

import pytest
from lxml import etree

from buildtool.config.config_loader import ConfigLoader
from buildtool.core.enums import RuleCategory, Severity
from buildtool.core.errors import PolicyViolation
from buildtool.core.models import LintPolicy
from buildtool.lint.checker import PolicyChecker
from buildtool.lint.policy import EffectivePolicy
from buildtool.lint.rules import Rule, builtin_rules
from buildtool.report.writers import render_sarif, render_xml
from buildtool.resolve.dependency_resolver import DependencyGraphBuilder
from buildtool.resolve.variant_resolver import VariantResolver


def _check(description, variant_name, min_sdk_floor=21):
    """Resolve a variant and run its lint policy"""
    variant = VariantResolver(description).resolve(variant_name)
    dependencies = DependencyGraphBuilder(description).resolve_all_scopes(variant_name)
    checker = PolicyChecker(description.lint, min_sdk_floor=min_sdk_floor)
    return checker.check(description, variant, dependencies)


def _rule_ids(report):
    return [finding.rule_id for finding in report.findings]


DEBUGGABLE_STAGING = {
    'release': {'minify_enabled': True, 'proguard_files': ['proguard-rules.pro']},
    'staging': {'init_with': 'release', 'debuggable': True},
}


class TestEffectivePolicy:
    """Test which rules a policy turns on and at what severity"""

    def test_defaults(self):
        effective = EffectivePolicy(LintPolicy(), builtin_rules())
        assert effective.is_enabled("ShrinkResourcesWithoutMinify")
        assert not effective.is_enabled("StopShip")
        assert not effective.is_enabled("DuplicateDependency")

    def test_explicit_severity_enables_rule(self):
        effective = EffectivePolicy(LintPolicy(severity_overrides={'StopShip': Severity.ERROR}), builtin_rules())
        assert effective.is_enabled("StopShip")

    def test_disable_wins_over_enable_and_severity(self):
        policy = LintPolicy(
            enable=['StopShip'],
            disable=['StopShip'],
            severity_overrides={'StopShip': Severity.ERROR},
        )
        assert not EffectivePolicy(policy, builtin_rules()).is_enabled("StopShip")

    def test_warnings_as_errors(self):
        rules = {rule.id: rule for rule in builtin_rules()}
        policy = LintPolicy(warnings_as_errors=True, severity_overrides={'MinSdkTooLow': Severity.INFORMATIONAL})
        effective = EffectivePolicy(policy, builtin_rules())

        assert effective.severity_for(rules["OldTargetApi"]) == Severity.ERROR
        assert effective.severity_for(rules["MinSdkTooLow"]) == Severity.INFORMATIONAL

    def test_unknown_rule_ids(self, app_description):
        effective = EffectivePolicy(app_description.lint, builtin_rules())
        assert effective.unknown_rule_ids() == ["AllowBackup", "HardcodedText", "UnusedResources"]


class TestPolicyChecker:
    """Test running a policy against resolved variants"""

    def test_demo_app_is_clean(self, app_description):
        for name in app_description.variant_names():
            report = _check(app_description, name)
            assert report.findings == ()
            assert not report.skipped

    def test_unknown_rules_recorded_on_report(self, app_description):
        report = _check(app_description, "release")
        assert report.unknown_rules == ("AllowBackup", "HardcodedText", "UnusedResources")
        assert "UnusedResources" not in report.checked_rules

    def test_disabled_rule_never_reported(self, make_description):
        """A rule that is enabled, given a severity and disabled produces nothing"""
        description = make_description(
            build_types=DEBUGGABLE_STAGING,
            lint={
                'enable': ['HardcodedDebugMode'],
                'error': ['HardcodedDebugMode'],
                'disable': ['HardcodedDebugMode'],
            },
        )
        report = _check(description, "staging")

        assert "HardcodedDebugMode" not in _rule_ids(report)
        assert "HardcodedDebugMode" not in report.checked_rules

    def test_severity_override_applies(self, make_description):
        description = make_description(build_types=DEBUGGABLE_STAGING, lint={'error': ['HardcodedDebugMode']})
        finding = _check(description, "staging").findings[0]

        assert finding.rule_id == "HardcodedDebugMode"
        assert finding.severity == Severity.ERROR
        assert finding.category == RuleCategory.SECURITY
        assert finding.location == "build_types.staging.debuggable"

    def test_warnings_as_errors_promotes_findings(self, make_description):
        description = make_description(build_types=DEBUGGABLE_STAGING, lint={'warnings_as_errors': True})
        report = _check(description, "staging")
        assert report.counts() == {'error': 1, 'warning': 0, 'informational': 0}

    def test_skips_release_builds(self, make_description):
        description = make_description(lint={'check_release_builds': False})

        assert _check(description, "release").skipped
        assert not _check(description, "debug").skipped

    def test_skips_dependency_rules(self, make_description):
        dependencies = [{'implementation': 'com.squareup.okhttp3:okhttp:4.+'}]
        checked = _check(make_description(dependencies=dependencies), "release")
        skipped = _check(
            make_description(dependencies=dependencies, lint={'check_dependencies': False}),
            "release",
        )

        assert _rule_ids(checked) == ["GradleDynamicVersion"]
        assert skipped.findings == ()
        assert "GradleDynamicVersion" not in skipped.checked_rules

    def test_explanations_follow_explain_issues(self, make_description):
        build_types = {'release': {'shrink_resources': True}}
        explained = _check(make_description(build_types=build_types), "release")
        terse = _check(make_description(build_types=build_types, lint={'explain_issues': False}), "release")

        assert explained.findings[0].explanation
        assert terse.findings[0].explanation is None

    def test_findings_sorted_by_severity(self, make_description):
        description = make_description(
            build_types={'release': {'shrink_resources': True}},
            dependencies=[{'implementation': 'com.squareup.okhttp3:okhttp:4.+'}],
        )
        report = _check(description, "release")

        assert [f.severity for f in report.findings] == [Severity.ERROR, Severity.WARNING]
        assert _rule_ids(report) == ["ShrinkResourcesWithoutMinify", "GradleDynamicVersion"]

    def test_custom_rules(self, app_description):
        """Checkers accept an explicit rule set instead of the built-in one"""
        rule = Rule(
            id="NamespaceDemo",
            summary="Namespace mentions demo",
            explanation="Demo namespaces should not ship.",
            category=RuleCategory.CORRECTNESS,
            default_severity=Severity.INFORMATIONAL,
            check=lambda ctx: [("project.namespace", "Namespace contains 'demo'")] if "demo" in ctx.project.namespace else [],
        )
        variant = VariantResolver(app_description).resolve("release")
        report = PolicyChecker(LintPolicy(), rules=[rule]).check(app_description, variant)

        assert _rule_ids(report) == ["NamespaceDemo"]
        assert report.checked_rules == ("NamespaceDemo",)

    def test_custom_rule_summary_reaches_reports(self, app_description):
        rule = Rule(
            id="NamespaceDemo",
            summary="Namespace mentions demo",
            explanation="Demo namespaces should not ship.",
            category=RuleCategory.CORRECTNESS,
            default_severity=Severity.WARNING,
            check=lambda ctx: [("project.namespace", "Namespace contains 'demo'")],
        )
        variant = VariantResolver(app_description).resolve("release")
        report = PolicyChecker(LintPolicy(explain_issues=True), rules=[rule]).check(app_description, variant)

        issue = etree.fromstring(render_xml(report).encode("utf-8")).find("issue")
        assert issue.get("summary") == "Namespace mentions demo"
        sarif_rule = json.loads(render_sarif(report))["runs"][0]["tool"]["driver"]["rules"][0]
        assert sarif_rule["shortDescription"]["text"] == "Namespace mentions demo"
        assert sarif_rule["fullDescription"]["text"] == "Demo namespaces should not ship."


class TestEnforce:
    """Test failing on error-severity findings"""

    def test_abort_on_error(self, make_description):
        description = make_description(build_types={'release': {'shrink_resources': True}})
        report = _check(description, "release")

        with pytest.raises(PolicyViolation) as exc_info:
            PolicyChecker(description.lint).enforce(report)

        assert exc_info.value.report is report
        assert "ShrinkResourcesWithoutMinify" in str(exc_info.value)

    def test_abort_disabled(self, make_description):
        description = make_description(
            build_types={'release': {'shrink_resources': True}},
            lint={'abort_on_error': False},
        )
        report = _check(description, "release")

        assert report.has_errors()
        PolicyChecker(description.lint).enforce(report)

    def test_warnings_do_not_abort(self, make_description):
        description = make_description(build_types=DEBUGGABLE_STAGING, lint={})
        report = _check(description, "staging")

        assert report.warnings()
        PolicyChecker(description.lint).enforce(report)


class TestBuiltinRules:
    """Test each built-in rule on a configuration that triggers it"""

    def test_old_target_api(self, app_config_dict):
        app_config_dict['project']['target_sdk'] = 33
        report = _check(ConfigLoader.load_from_dict(app_config_dict), "release")
        assert _rule_ids(report) == ["OldTargetApi"]
        assert report.findings[0].location == "project.target_sdk"

    def test_min_sdk_floor(self, app_description):
        report = _check(app_description, "release", min_sdk_floor=28)
        assert _rule_ids(report) == ["MinSdkTooLow"]
        assert report.findings[0].severity == Severity.INFORMATIONAL

    def test_debug_lineage_may_be_debuggable(self, make_description):
        description = make_description(lint={})
        assert "HardcodedDebugMode" not in _rule_ids(_check(description, "debugMinified"))

    def test_minify_without_proguard_files(self, make_description):
        description = make_description(build_types={'release': {'minify_enabled': True}})
        assert _rule_ids(_check(description, "release")) == ["MinifyWithoutProguardFiles"]

    def test_unknown_matching_fallback(self, make_description):
        description = make_description(build_types={'staging': {'matching_fallbacks': ['qa']}})
        report = _check(description, "staging")
        assert _rule_ids(report) == ["UnknownMatchingFallback"]
        assert report.findings[0].severity == Severity.ERROR

    def test_stop_ship_off_by_default(self, app_config_dict):
        app_config_dict['project']['version_name'] = "1.0-STOPSHIP"
        app_config_dict['lint'] = {}
        report = _check(ConfigLoader.load_from_dict(app_config_dict), "release")
        assert "StopShip" not in _rule_ids(report)

    def test_stop_ship_enabled(self, app_config_dict):
        app_config_dict['project']['version_name'] = "1.0-STOPSHIP"
        report = _check(ConfigLoader.load_from_dict(app_config_dict), "release")
        assert _rule_ids(report) == ["StopShip"]
        assert report.findings[0].severity == Severity.ERROR

    def test_java_version_mismatch(self, app_config_dict):
        app_config_dict['compile_options']['jvm_target'] = "17"
        report = _check(ConfigLoader.load_from_dict(app_config_dict), "release")
        assert _rule_ids(report) == ["JavaVersionMismatch"]

    def test_plugin_without_version(self, app_config_dict):
        app_config_dict['plugins'].append({'id': 'com.google.gms.google-services'})
        report = _check(ConfigLoader.load_from_dict(app_config_dict), "release")
        assert _rule_ids(report) == ["PluginWithoutVersion"]
        assert report.findings[0].location == "plugins.com.google.gms.google-services"

    def test_superseded_dependency(self, make_description):
        description = make_description(dependencies=[
            {'implementation': 'androidx.appcompat:appcompat:1.7.1'},
            {'implementation': 'androidx.appcompat:appcompat:1.9.0'},
        ])
        report = _check(description, "release")
        assert _rule_ids(report) == ["GradleDependency"]
        assert "androidx.appcompat:appcompat:1.7.1 is superseded by version 1.9.0" == report.findings[0].message

    def test_unused_dependency_override(self, make_description):
        description = make_description(dependency_overrides={'com.example:missing': '1.0'})
        report = _check(description, "release")
        assert _rule_ids(report) == ["UnusedDependencyOverride"]
        assert report.findings[0].location == "dependency_overrides"

    def test_duplicate_dependency_when_enabled(self, make_description):
        description = make_description(
            dependencies=[
                {'implementation': 'junit:junit:4.13.2'},
                {'implementation': 'junit:junit:4.13.2'},
            ],
            lint={'enable': ['DuplicateDependency']},
        )
        report = _check(description, "release")
        assert _rule_ids(report) == ["DuplicateDependency"]
        assert report.findings[0].severity == Severity.INFORMATIONAL

    def test_variant_dependencies_only_checked_for_their_variant(self, make_description):
        description = make_description(dependencies=[
            {'debugImplementation': 'com.squareup.leakcanary:leakcanary-android:2.+'},
        ])
        assert _rule_ids(_check(description, "debug")) == ["GradleDynamicVersion"]
        assert _check(description, "release").findings == ()
