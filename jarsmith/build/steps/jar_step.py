"""
Jar 写入步骤模块

用 classes 目录和生成的 Manifest 写出项目自身的 jar。
"""

from typing import Optional

from ...utils import format_size
from ...utils.logging import info, success, debug, error, LogStage
from jarsmith.build.archive import ArchiveWriter
from jarsmith.build.build_context import BuildContext
from jarsmith.build.manifest import ManifestBuilder
from .build_step import BuildStep


class JarStep(BuildStep):
    """Jar 写入步骤"""

    def __init__(self):
        super().__init__("jar", "写入项目 jar")

    def execute(self, context: BuildContext) -> Optional[BuildContext]:
        params = context.params
        jar_file = context.jar_file
        info(f"写入 jar {jar_file.name}", stage=LogStage.JAR)

        try:
            # Manifest 先于输出文件构建，属性名不合法时不会留下任何输出
            builder = ManifestBuilder(jdk_spec=params.jar.jdk_spec)
            manifest = builder.build_default(params.main_class)
            debug(f"Manifest: {dict(manifest.main_attributes.items())}", stage=LogStage.JAR)

            writer = ArchiveWriter(compress=params.jar.compress, reproducible=params.jar.reproducible)
            entry_count = writer.write(jar_file, manifest, context.class_dir)
        except Exception as e:
            error(f"写入 jar 失败: {e}", stage=LogStage.JAR)
            raise

        success(
            f"jar 写入完成 - {entry_count} 个条目, {format_size(jar_file.stat().st_size)}",
            stage=LogStage.JAR,
        )
        return context.with_artifact("jar", jar_file)
