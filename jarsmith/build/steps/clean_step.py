"""
清理步骤模块

删除整个输出目录。
"""

from types import MappingProxyType
from typing import Optional

from ...utils.logging import info, error, LogStage
from ...utils.paths import delete_tree
from jarsmith.build.build_context import BuildContext
from .build_step import BuildStep


class CleanStep(BuildStep):
    """清理步骤"""

    def __init__(self):
        super().__init__("clean", "清理输出目录")

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        info(f"清理 {context.target_dir}", stage=LogStage.CLEAN)
        try:
            delete_tree(context.target_dir)
        except OSError as e:
            error(f"清理失败: {e}", stage=LogStage.CLEAN)
            raise
        return context.evolve(artifacts=MappingProxyType({}), conflicts=())
