from .loader import apply_overrides, load_config, load_config_with_overrides
from .schema import DavidConfig, ServiceConfig, APIConfig, DEFAULT_ANNOTATION_CATEGORIES

__all__ = [
    "apply_overrides",
    "load_config",
    "load_config_with_overrides",
    "DavidConfig",
    "ServiceConfig",
    "APIConfig",
    "DEFAULT_ANNOTATION_CATEGORIES",
]
