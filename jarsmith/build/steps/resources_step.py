"""
资源复制步骤模块

把资源目录的内容合并到 classes 目录，随后一起打进 jar。
"""

from pathlib import Path
from typing import Optional

from ...utils import ensure_directory
from ...utils.logging import info, success, warning, error, LogStage
from jarsmith.build.archive import ArchiveExploder
from jarsmith.build.build_context import BuildContext
from .build_step import BuildStep


class ResourcesStep(BuildStep):
    """资源复制步骤"""

    def __init__(self):
        super().__init__("resources", "复制资源目录")
        self.exploder = ArchiveExploder()

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        resource_dirs = [Path(p) for p in context.params.resource_dirs]
        if not resource_dirs:
            return context

        class_dir = ensure_directory(context.class_dir)
        conflicts = []
        for resource_dir in resource_dirs:
            if not resource_dir.is_dir():
                warning(f"资源目录不存在: {resource_dir}", stage=LogStage.RESOURCES)
                continue

            info(f"复制资源 {resource_dir}", stage=LogStage.RESOURCES)
            try:
                conflicts.extend(self.exploder.explode(resource_dir, class_dir))
            except OSError as e:
                error(f"复制资源失败: {e}", stage=LogStage.RESOURCES)
                raise

        success("资源复制完成", stage=LogStage.RESOURCES)
        return context.with_artifact("classes", class_dir).with_conflicts(conflicts)
