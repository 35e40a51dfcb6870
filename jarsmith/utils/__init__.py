"""通用工具模块"""

from .logging import (
    LogStage,
    OutputLevel,
    configure_logging,
    set_log_file,
    set_log_level,
)

from .paths import (
    delete_tree,
    ensure_directory,
    format_size,
    get_temp_dir,
    safe_path_join,
)

__all__ = [
    # 日志相关
    "LogStage",
    "OutputLevel",
    "configure_logging",
    "set_log_file",
    "set_log_level",

    # 路径相关
    "delete_tree",
    "ensure_directory",
    "format_size",
    "get_temp_dir",
    "safe_path_join",
]
