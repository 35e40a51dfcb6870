"""
Uber jar 步骤模块

把项目 jar 和所有依赖合并为 <artifact>-<version>-standalone.jar。
"""

from typing import Optional

from ...utils.logging import info, error, LogStage
from jarsmith.build.archive import ArchiveWriter
from jarsmith.build.build_context import BuildContext
from jarsmith.build.uber import UberAssembler
from .build_step import BuildStep


class UberStep(BuildStep):
    """Uber jar 步骤"""

    def __init__(self):
        super().__init__("uber", "合并为 uber jar")

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        params = context.params
        uber_file = context.uber_file
        info(f"创建 uber jar {uber_file}", stage=LogStage.UBER)

        if not context.jar_file.is_file():
            error(f"项目 jar 不存在: {context.jar_file}，请先执行 jar 任务", stage=LogStage.UBER)
            raise FileNotFoundError(f"项目 jar 不存在: {context.jar_file}")

        assembler = UberAssembler(
            writer=ArchiveWriter(compress=params.jar.compress, reproducible=params.jar.reproducible),
        )
        try:
            result = assembler.assemble(
                context.jar_file,
                context.lib_paths(),
                uber_file,
                context.uber_dir,
            )
        except Exception as e:
            error(f"创建 uber jar 失败: {e}，暂存目录保留在 {context.uber_dir}", stage=LogStage.UBER)
            raise

        return context.with_artifact("uber", uber_file).with_conflicts(result.conflicts)
