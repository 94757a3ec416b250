"""Pytest configuration and fixtures for buildtool tests."""

import copy
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import yaml
import logging

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from buildtool.config.config_loader import ConfigLoader
from buildtool.core.models import BuildDescription

# Configure logging
logging.basicConfig(level=logging.INFO)



@pytest.fixture
def example_config_path() -> Path:
    """Path to the demo app configuration shipped in examples/"""
    return project_root / "examples" / "configs" / "app.yaml"


@pytest.fixture
def app_config_dict() -> Dict[str, Any]:
    """The demo app's build configuration."""
    return {
        'plugins': [
            {'id': 'com.android.application', 'version': '8.2.2'},
            {'id': 'org.jetbrains.kotlin.android', 'version': '1.9.22'},
        ],
        'project': {
            'namespace': 'com.beco.demo',
            'compile_sdk': 34,
            'min_sdk': 26,
            'target_sdk': 34,
            'version_code': 1,
            'version_name': '1.0',
            'test_instrumentation_runner': 'androidx.test.runner.AndroidJUnitRunner',
            'build_features': {'view_binding': True},
        },
        'compile_options': {
            'source_compatibility': '1.8',
            'target_compatibility': '1.8',
            'jvm_target': '1.8',
        },
        'build_types': {
            'debug': {'minify_enabled': False, 'debuggable': True},
            'release': {
                'minify_enabled': True,
                'shrink_resources': True,
                'debuggable': False,
                'proguard_files': ['proguard-android-optimize.txt', 'proguard-rules.pro'],
            },
            'debugMinified': {
                'init_with': 'debug',
                'minify_enabled': True,
                'shrink_resources': True,
                'debuggable': True,
                'proguard_files': ['proguard-android-optimize.txt', 'proguard-rules.pro'],
                'matching_fallbacks': ['debug'],
            },
        },
        'dependencies': [
            {'implementation': 'androidx.core:core-ktx:1.12.0'},
            {'implementation': 'androidx.appcompat:appcompat:1.7.1'},
            {'implementation': 'com.google.android.material:material:1.12.0'},
            {'implementation': 'androidx.constraintlayout:constraintlayout:2.2.1'},
            {'testImplementation': 'junit:junit:4.13.2'},
            {'androidTestImplementation': 'androidx.test.ext:junit:1.2.1'},
            {'androidTestImplementation': 'androidx.test.espresso:espresso-core:3.6.1'},
            {'implementation': 'com.becomap.sdk:becomap:2.0.3'},
        ],
        'lint': {
            'abort_on_error': True,
            'check_release_builds': True,
            'check_dependencies': True,
            'explain_issues': True,
            'enable': ['UnusedResources', 'GradleDependency', 'StopShip'],
            'disable': ['HardcodedDebugMode', 'AllowBackup'],
            'error': ['StopShip', 'ShrinkResourcesWithoutMinify'],
            'warning': ['HardcodedText'],
            'informational': ['MinSdkTooLow'],
            'sarif_report': True,
        },
    }


@pytest.fixture
def make_description(app_config_dict) -> Callable[..., BuildDescription]:
    """Build a description from the demo config with top-level sections replaced."""
    def factory(build_dir: str = "./build", **sections) -> BuildDescription:
        data = copy.deepcopy(app_config_dict)
        for key, value in sections.items():
            data[key] = value
        return ConfigLoader.load_from_dict(data, build_dir=build_dir)
    return factory


@pytest.fixture
def app_description(make_description) -> BuildDescription:
    """The demo app description."""
    return make_description()


@pytest.fixture
def write_config(tmp_path) -> Callable[[Dict[str, Any]], Path]:
    """Write a config dict to a YAML file under tmp_path."""
    def writer(data: Dict[str, Any], name: str = "app.yaml") -> Path:
        path = tmp_path / name
        with open(path, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=False)
        return path
    return writer
