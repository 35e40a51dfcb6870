"""配置和 Schema 模块

提供 build.yaml 的加载、验证和保存功能。
"""

from .schema import BuildConfig, JarModel, LibModel, DEFAULT_TASKS, KNOWN_TASKS
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    ValidationResult,
    load_config,
    validate_config,
    validate_config_with_result,
    save_config,
    config_loader
)

__all__ = [
    # 主要类
    "BuildConfig",
    "JarModel",
    "LibModel",
    "ConfigLoader",
    "ValidationResult",
    "DEFAULT_TASKS",
    "KNOWN_TASKS",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_config",
    "validate_config",
    "validate_config_with_result",
    "save_config",

    # 单例
    "config_loader",
]
