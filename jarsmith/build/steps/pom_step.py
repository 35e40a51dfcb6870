"""
POM 同步步骤模块

把项目的 pom.xml 复制到 classes/META-INF/maven/<group>/<artifact>/，并生成 pom.properties。
"""

import shutil
import time
from typing import Optional

from ...errors import ConfigurationError
from ...utils import ensure_directory
from ...utils.logging import info, success, error, LogStage
from jarsmith.build.build_context import BuildContext
from .build_step import BuildStep


class SyncPomStep(BuildStep):
    """POM 同步步骤"""

    def __init__(self):
        super().__init__("sync-pom", "同步 POM 描述文件")

    @staticmethod
    def pom_properties(group_id: str, artifact_id: str, version: str) -> str:
        lines = [
            "# Generated by jarsmith",
            f"# {time.strftime('%a %b %d %H:%M:%S %Z %Y')}",
            f"version={version}",
            f"groupId={group_id}",
            f"artifactId={artifact_id}",
        ]
        return "\n".join(lines) + "\n"

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        params = context.params
        group_id, artifact_id = params.coordinate
        src_pom = params.src_pom

        if not src_pom.is_file():
            error(f"POM 文件不存在: {src_pom}", stage=LogStage.POM)
            raise ConfigurationError(f"POM 文件不存在: {src_pom}")

        pom_dir = context.class_dir / "META-INF" / "maven" / group_id / artifact_id
        info(f"同步 POM {src_pom} -> {pom_dir}", stage=LogStage.POM)

        try:
            ensure_directory(pom_dir)
            shutil.copyfile(src_pom, pom_dir / "pom.xml")
            (pom_dir / "pom.properties").write_text(
                self.pom_properties(group_id, artifact_id, params.version),
                encoding="utf-8",
            )
        except OSError as e:
            error(f"同步 POM 失败: {e}", stage=LogStage.POM)
            raise

        success("POM 同步完成", stage=LogStage.POM)
        return context.with_artifact("pom", pom_dir / "pom.xml")
