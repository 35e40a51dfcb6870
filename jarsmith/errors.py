"""
异常定义

构建过程中所有可预期的失败都归属于 BuildError 体系。
文件系统错误保持为内置的 OSError，不做包装。
"""

from typing import Optional


class BuildError(Exception):
    """构建错误基类"""
    pass


class ConfigurationError(BuildError):
    """构建参数缺失或无效"""
    pass


class ArchiveError(BuildError):
    """归档相关错误"""
    pass


class ArchiveReadError(ArchiveError):
    """归档格式错误、被截断或无法读取"""
    pass


class ArchiveWriteError(ArchiveError):
    """写出归档条目时失败"""
    pass


class InvalidAttributeName(BuildError, ValueError):
    """Manifest 属性名不合法"""

    def __init__(self, name: str):
        super().__init__(f"非法的 Manifest 属性名: {name!r}")
        self.name = name


class CompileError(BuildError):
    """编译失败"""

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class PipelineError(BuildError):
    """构建管道中某个步骤失败"""

    def __init__(self, message: str, step_name: Optional[str] = None):
        super().__init__(message)
        self.step_name = step_name
