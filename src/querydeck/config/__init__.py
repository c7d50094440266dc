from querydeck.config.loader import (
    get_platform_config_path,
    load_settings,
    resolve_config_path,
)
from querydeck.config.settings import (
    ExecutionSettings,
    FormattingSettings,
    GatewayConfig,
    Settings,
)

__all__ = [
    "ExecutionSettings",
    "FormattingSettings",
    "GatewayConfig",
    "Settings",
    "get_platform_config_path",
    "load_settings",
    "resolve_config_path",
]
