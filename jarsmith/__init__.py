"""
jarsmith - Java 构建任务管道与 uber jar 合并工具

A build-task pipeline that compiles Java sources, writes a jar and
merges it with its dependencies into a standalone archive.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# 导出主要 API
from .config.schema import BuildConfig
from .build.builder import Builder, BuildResult
from .errors import BuildError

__all__ = ["BuildConfig", "Builder", "BuildResult", "BuildError", "__version__"]
