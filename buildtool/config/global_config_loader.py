import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class BuildSettings:
    """Build output configuration"""
    build_dir: str = "./build"
    write_metadata: bool = True


@dataclass
class LintSettings:
    """Thresholds used by the built-in lint rules"""
    min_sdk_floor: int = 21


@dataclass
class GlobalConfig:
    """Tool-wide settings for buildtool"""
    logging: LoggingConfig
    build: BuildSettings
    lint: LintSettings

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GlobalConfig':
        """Create GlobalConfig from dictionary"""
        return cls(
            logging=LoggingConfig(**data.get('logging', {})),
            build=BuildSettings(**data.get('build', {})),
            lint=LintSettings(**data.get('lint', {})),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GlobalConfig':
        """Load GlobalConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            # Return default config if file doesn't exist
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def default(cls) -> 'GlobalConfig':
        """Return default configuration"""
        return cls(
            logging=LoggingConfig(),
            build=BuildSettings(),
            lint=LintSettings(),
        )


def load_global_config(config_path: Optional[str] = None) -> GlobalConfig:
    """
    Load global configuration from YAML file.
    If no path provided, looks for buildtool.yaml in standard locations.
    """
    if config_path:
        return GlobalConfig.from_yaml(config_path)

    search_paths = [
        Path("./buildtool.yaml"),
        Path("./config/buildtool.yaml"),
        Path.home() / ".config" / "buildtool" / "buildtool.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return GlobalConfig.from_yaml(str(path))

    return GlobalConfig.default()
