"""
Uber 归档组装器

把所有依赖和项目自身的归档展开到同一个暂存目录，再整体重新打包成一个自包含的归档。
项目自身的归档最后展开，因此同名文件总是以项目自身的内容为准。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from ..errors import ArchiveReadError, ConfigurationError
from ..utils.logging import info, success, warning, LogStage
from ..utils.paths import delete_tree, ensure_directory, format_size
from .archive import ArchiveExploder, ArchiveWriter
from .manifest import read_manifest


@dataclass
class UberResult:
    """组装结果"""
    output_file: Path
    inputs: List[Path] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    entry_count: int = 0


def check_staging_dir(staging_dir: Path, paths: Sequence[Path]) -> None:
    """确认暂存目录与给定路径互不包含

    Raises:
        ConfigurationError: 暂存目录等于某个路径或是它的上级目录
    """
    staging = Path(staging_dir).resolve()
    for path in paths:
        resolved = Path(path).resolve()
        if staging == resolved or staging in resolved.parents:
            raise ConfigurationError(f"暂存目录 {staging_dir} 包含输入或输出路径: {path}")


class UberAssembler:
    """Uber 归档组装器"""

    def __init__(self, exploder: ArchiveExploder = None, writer: ArchiveWriter = None):
        self.exploder = exploder or ArchiveExploder()
        self.writer = writer or ArchiveWriter()

    def assemble(
        self,
        primary_archive: Union[str, Path],
        dependency_paths: Sequence[Union[str, Path]],
        output_file: Union[str, Path],
        staging_dir: Union[str, Path],
    ) -> UberResult:
        """组装 uber 归档

        Args:
            primary_archive: 项目自身的归档，其 Manifest 原样用于输出
            dependency_paths: 依赖路径（归档、普通文件或目录），按顺序展开
            output_file: 输出归档路径
            staging_dir: 暂存目录，开始前会被清空；失败时保留以便排查
                不能是任何输入或输出文件本身，也不能是它们的上级目录

        Returns:
            UberResult: 输入列表、冲突记录和条目数

        Raises:
            ConfigurationError: 暂存目录会覆盖某个输入或输出
            FileNotFoundError: 项目归档或某个依赖不存在
            ArchiveReadError: 项目归档没有 Manifest，或某个归档损坏
            ArchiveWriteError: 写出失败
        """
        primary_archive = Path(primary_archive)
        output_file = Path(output_file)
        staging_dir = Path(staging_dir)
        inputs = [Path(p) for p in dependency_paths]
        inputs.append(primary_archive)

        # 暂存目录会被整体删除，必须先确认它不包含任何输入和输出
        check_staging_dir(staging_dir, inputs + [output_file])

        manifest = read_manifest(primary_archive)
        if manifest is None:
            raise ArchiveReadError(f"项目归档中没有 Manifest: {primary_archive}")

        delete_tree(staging_dir)
        ensure_directory(staging_dir)

        result = UberResult(output_file=output_file, inputs=inputs)
        for index, source in enumerate(inputs, 1):
            info(f"[{index}/{len(inputs)}] 展开 {source}", stage=LogStage.UBER)
            result.conflicts.extend(self.exploder.explode(source, staging_dir))

        if result.conflicts:
            warning(f"共 {len(result.conflicts)} 处路径冲突，已按后展开者覆盖", stage=LogStage.UBER)

        result.entry_count = self.writer.write(output_file, manifest, staging_dir)
        success(
            f"Uber 归档写入完成: {output_file} "
            f"({result.entry_count} 个条目, {format_size(output_file.stat().st_size)})",
            stage=LogStage.UBER,
        )
        return result
