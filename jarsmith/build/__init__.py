"""构建服务模块

提供 jar 构建与 uber jar 合并的核心功能。
"""

from .builder import Builder, BuildResult, BuildError
from .build_context import BuildContext
from .build_pipeline import BuildPipeline, PipelineRun
from .collector import FileCollector, FileCollection, FileInfo, collect_files, suffixes
from .manifest import Manifest, ManifestBuilder, read_manifest
from .archive import ArchiveSink, ArchiveWriter, ArchiveExploder, explode
from .uber import UberAssembler, UberResult

__all__ = [
    # 主构建器
    "Builder",
    "BuildResult",
    "BuildError",
    "BuildContext",
    "BuildPipeline",
    "PipelineRun",

    # 文件收集
    "FileCollector",
    "FileCollection",
    "FileInfo",
    "collect_files",
    "suffixes",

    # Manifest
    "Manifest",
    "ManifestBuilder",
    "read_manifest",

    # 归档读写
    "ArchiveSink",
    "ArchiveWriter",
    "ArchiveExploder",
    "explode",
    "UberAssembler",
    "UberResult",
]
