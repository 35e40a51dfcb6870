"""
终止步骤模块
"""

from typing import Optional

from ...utils.logging import info, LogStage
from jarsmith.build.build_context import BuildContext
from .build_step import BuildStep


class EndStep(BuildStep):
    """终止构建管道，之后的步骤都不再执行"""

    def __init__(self):
        super().__init__("end", "终止构建")

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        info("收到终止请求", stage=LogStage.PIPELINE)
        return None
