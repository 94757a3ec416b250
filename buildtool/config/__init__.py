from .config_loader import ConfigLoader
from .config_serializer import ConfigSerializer
from .global_config_loader import GlobalConfig, load_global_config

__all__ = [
    'ConfigLoader',
    'ConfigSerializer',
    'GlobalConfig',
    'load_global_config',
]
