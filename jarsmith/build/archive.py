"""
归档读写

ArchiveWriter 把一个目录树写成带 Manifest 头的 JAR/ZIP 归档；
ArchiveExploder 把归档（或普通文件/目录）展开到暂存目录，并报告路径冲突。
"""

import os
import time
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Tuple, Union

from ..errors import ArchiveReadError, ArchiveWriteError
from ..utils.logging import debug, warning, LogStage
from ..utils.paths import safe_path_join
from .collector import FileInfo, collect_files
from .manifest import MANIFEST_NAME, Manifest

# 展开和写入时使用的固定传输缓冲区大小
TRANSFER_BUFFER_SIZE = 64 * 1024

# ZIP 能表示的最早时间，可复现模式下所有条目都使用它
REPRODUCIBLE_DATE_TIME = (1980, 1, 1, 0, 0, 0)

ARCHIVE_SUFFIXES = ('.jar', '.zip')

_FILE_MODE = 0o100644 << 16
_DIR_MODE = (0o40755 << 16) | 0x10  # 0x10: MS-DOS 目录标记

ConflictCallback = Callable[[str], None]


def is_archive(path: Union[str, Path]) -> bool:
    """按文件后缀判断是否为压缩归档"""
    return Path(path).name.lower().endswith(ARCHIVE_SUFFIXES)


def _transfer(src: BinaryIO, dst: BinaryIO, buffer_size: int = TRANSFER_BUFFER_SIZE) -> int:
    """用固定大小的缓冲区把 src 全部拷贝到 dst，返回字节数"""
    total = 0
    while True:
        chunk = src.read(buffer_size)
        if not chunk:
            break
        dst.write(chunk)
        total += len(chunk)
    return total


class ArchiveSink:
    """归档输出句柄

    独占一个输出 ZIP 文件，只能通过 add_* 方法追加条目。
    作为上下文管理器使用时，无论成功与否都会关闭底层文件。
    """

    def __init__(self, output_file: Union[str, Path], compress: bool = True, reproducible: bool = True):
        self.output_file = Path(output_file)
        self.compression = zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED
        self.reproducible = reproducible
        self.entry_names: List[str] = []
        self._zf: Optional[zipfile.ZipFile] = None

    def __enter__(self) -> 'ArchiveSink':
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._zf is not None:
            raise ArchiveWriteError(f"归档已经打开: {self.output_file}")
        self._zf = zipfile.ZipFile(self.output_file, 'w', self.compression)

    def close(self) -> None:
        if self._zf is not None:
            zf, self._zf = self._zf, None
            zf.close()

    @property
    def closed(self) -> bool:
        return self._zf is None

    def _require_open(self) -> zipfile.ZipFile:
        if self._zf is None:
            raise ArchiveWriteError(f"归档未打开: {self.output_file}")
        return self._zf

    def _entry_info(self, name: str, mtime: Optional[float], is_directory: bool) -> zipfile.ZipInfo:
        if self.reproducible or mtime is None:
            date_time: Tuple[int, ...] = REPRODUCIBLE_DATE_TIME
        else:
            date_time = time.localtime(mtime)[:6]
            if date_time[0] < 1980:
                date_time = REPRODUCIBLE_DATE_TIME

        info = zipfile.ZipInfo(name, date_time=date_time)
        if is_directory:
            info.external_attr = _DIR_MODE
            info.compress_type = zipfile.ZIP_STORED
        else:
            info.external_attr = _FILE_MODE
            info.compress_type = self.compression
        return info

    def add_bytes(self, name: str, data: bytes, mtime: Optional[float] = None) -> None:
        """写入一个内容在内存中的文件条目"""
        zf = self._require_open()
        zf.writestr(self._entry_info(name, mtime, is_directory=False), data)
        self.entry_names.append(name)

    def add_directory(self, name: str, mtime: Optional[float] = None) -> None:
        """写入目录条目，名称会补齐结尾的 /"""
        if not name.endswith('/'):
            name += '/'
        zf = self._require_open()
        zf.writestr(self._entry_info(name, mtime, is_directory=True), b'')
        self.entry_names.append(name)

    def add_file(self, name: str, source: Path, mtime: Optional[float] = None) -> int:
        """把磁盘文件的完整内容流式写入条目，返回写入的字节数"""
        zf = self._require_open()
        info = self._entry_info(name, mtime, is_directory=False)
        with open(source, 'rb') as src, zf.open(info, 'w') as dst:
            size = _transfer(src, dst)
        self.entry_names.append(name)
        return size

    def add_entry(self, file_info: FileInfo) -> None:
        """按收集到的文件信息写入一个条目"""
        if file_info.is_directory:
            self.add_directory(file_info.entry_name, file_info.mtime)
        else:
            self.add_file(file_info.entry_name, file_info.path, file_info.mtime)


class ArchiveWriter:
    """归档写入器

    先写 META-INF/MANIFEST.MF，再按收集器的遍历顺序写入根目录下的所有条目。
    """

    def __init__(self, compress: bool = True, reproducible: bool = True):
        self.compress = compress
        self.reproducible = reproducible

    def write(self, output_file: Union[str, Path], manifest: Manifest, root_dir: Union[str, Path]) -> int:
        """把 root_dir 写成归档

        Args:
            output_file: 输出归档路径
            manifest: 作为第一个条目写入的 Manifest
            root_dir: 要打包的根目录，不存在时只写 Manifest

        Returns:
            int: 写入的条目数（包括 Manifest）

        Raises:
            ArchiveWriteError: 写入失败，输出文件可能只写了一部分
        """
        output_file = Path(output_file)
        root_dir = Path(root_dir)
        manifest_bytes = manifest.to_bytes()

        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with ArchiveSink(output_file, self.compress, self.reproducible) as sink:
                sink.add_bytes(MANIFEST_NAME, manifest_bytes)

                for file_info in collect_files(root_dir, dirs=True):
                    entry_name = file_info.entry_name
                    if not entry_name:
                        continue
                    # Manifest 已经作为头部写入
                    if entry_name.upper() == MANIFEST_NAME:
                        debug(f"跳过目录树中的 {entry_name}", stage=LogStage.WRITE)
                        continue
                    sink.add_entry(file_info)

                return len(sink.entry_names)
        except ArchiveWriteError:
            raise
        except (OSError, zipfile.BadZipFile, zlib.error, ValueError) as e:
            raise ArchiveWriteError(f"写入归档失败 {output_file}: {e}") from e


class ArchiveExploder:
    """归档展开器

    已存在的文件会被覆盖，覆盖前输出冲突警告；冲突不会中断展开。
    """

    def __init__(self, buffer_size: int = TRANSFER_BUFFER_SIZE, on_conflict: Optional[ConflictCallback] = None):
        self.buffer_size = buffer_size
        self.on_conflict = on_conflict

    def explode(self, source: Union[str, Path], out_dir: Union[str, Path]) -> List[str]:
        """把 source 展开到 out_dir

        Args:
            source: 归档文件（.jar/.zip），或普通文件/目录
            out_dir: 目标目录

        Returns:
            List[str]: 本次展开中被覆盖的条目路径

        Raises:
            FileNotFoundError: source 不存在
            ArchiveReadError: 归档格式错误或被截断
            OSError: 其他文件系统错误
        """
        source = Path(source)
        out_dir = Path(out_dir)

        if not source.exists():
            raise FileNotFoundError(f"输入不存在: {source}")

        out_dir.mkdir(parents=True, exist_ok=True)

        if source.is_file() and is_archive(source):
            return self._explode_archive(source, out_dir)
        return self._copy_plain(source, out_dir)

    def _conflict(self, name: str, conflicts: List[str]) -> None:
        warning(f"冲突: {name}", stage=LogStage.EXPLODE)
        conflicts.append(name)
        if self.on_conflict:
            self.on_conflict(name)

    def _explode_archive(self, source: Path, out_dir: Path) -> List[str]:
        conflicts: List[str] = []
        debug(f"展开归档: {source}", stage=LogStage.EXPLODE)

        try:
            with zipfile.ZipFile(source, 'r') as zf:
                for info in zf.infolist():
                    try:
                        target = safe_path_join(out_dir, info.filename)
                    except ValueError as e:
                        warning(f"跳过不安全的条目 {info.filename}: {e}", stage=LogStage.EXPLODE)
                        continue

                    if info.is_dir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue

                    target.parent.mkdir(parents=True, exist_ok=True)
                    if target.exists():
                        self._conflict(info.filename, conflicts)

                    with zf.open(info) as src, open(target, 'wb') as dst:
                        _transfer(src, dst, self.buffer_size)

                    mtime = time.mktime(info.date_time + (0, 0, -1))
                    os.utime(target, (mtime, mtime))
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
            raise ArchiveReadError(f"无法读取归档 {source}: {e}") from e

        return conflicts

    def _copy_plain(self, source: Path, out_dir: Path) -> List[str]:
        conflicts: List[str] = []
        debug(f"复制: {source}", stage=LogStage.EXPLODE)

        for file_info in collect_files(source, dirs=True):
            entry_name = file_info.entry_name
            if not entry_name:
                continue

            target = out_dir / file_info.relative_path
            if file_info.is_directory:
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            if target.exists():
                self._conflict(entry_name, conflicts)

            with open(file_info.path, 'rb') as src, open(target, 'wb') as dst:
                _transfer(src, dst, self.buffer_size)

        return conflicts


def explode(source: Union[str, Path], out_dir: Union[str, Path]) -> List[str]:
    """便捷函数：展开单个输入"""
    return ArchiveExploder().explode(source, out_dir)
