"""
构建步骤基类模块

定义构建步骤的抽象接口。
"""

from abc import ABC, abstractmethod
from typing import Optional

from jarsmith.build.build_context import BuildContext


class BuildStep(ABC):
    """构建步骤抽象基类

    execute 接收上下文并返回新的上下文；返回 None 表示终止整个管道。
    """

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    @abstractmethod
    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        """执行构建步骤"""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
