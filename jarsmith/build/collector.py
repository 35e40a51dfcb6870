"""
文件收集器

递归遍历目录，按后缀过滤或包含目录，产出相对于根目录的文件信息。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union

# 选择谓词：返回 True 表示收集该路径
Selector = Callable[[Path], bool]


@dataclass
class FileInfo:
    """文件信息"""
    path: Path  # 实际路径
    relative_path: Path  # 相对于收集根目录的路径，根目录本身为 Path("")
    size: int  # 文件大小（字节），目录为 0
    mtime: float  # 修改时间（时间戳）
    is_directory: bool = False  # 是否为目录

    @property
    def entry_name(self) -> str:
        """归档条目名：正斜杠分隔，目录以 / 结尾，根目录为空字符串"""
        name = self.relative_path.as_posix()
        if name == ".":
            name = ""
        if self.is_directory and name and not name.endswith('/'):
            name += '/'
        return name

    def to_dict(self) -> Dict[str, object]:
        """转换为字典格式"""
        return {
            'path': self.entry_name,
            'size': self.size,
            'mtime': self.mtime,
            'is_directory': self.is_directory,
        }


def suffixes(*exts: str) -> Selector:
    """按文件后缀选择，例如 suffixes(".java")"""
    wanted = tuple(exts)

    def _select(path: Path) -> bool:
        return path.name.endswith(wanted)

    return _select


class FileCollection:
    """可重复遍历的收集结果

    每次迭代都会重新遍历文件系统，因此结果反映遍历时刻的目录内容。
    根目录不存在或为空时产出空序列，不抛出异常。
    """

    def __init__(self, root: Union[str, Path], selector: Optional[Selector] = None, dirs: bool = False):
        self.root = Path(root)
        self.selector = selector
        self.dirs = dirs

    def __iter__(self) -> Iterator[FileInfo]:
        if not self.root.exists():
            return
        if self.root.is_file():
            if self._wanted_file(self.root):
                yield self._create_file_info(self.root, Path(self.root.name))
            return
        yield from self._walk_directory(self.root)

    def _wanted_file(self, path: Path) -> bool:
        return self.selector is None or self.selector(path)

    def _walk_directory(self, directory: Path) -> Iterator[FileInfo]:
        """先序遍历：先产出目录本身，再按名称顺序处理子项"""
        if self.dirs:
            yield self._create_file_info(directory, directory.relative_to(self.root), is_directory=True)

        for item in sorted(directory.iterdir(), key=lambda p: p.name):
            if item.is_dir():
                yield from self._walk_directory(item)
            elif self._wanted_file(item):
                yield self._create_file_info(item, item.relative_to(self.root))

    @staticmethod
    def _create_file_info(path: Path, relative_path: Path, is_directory: bool = False) -> FileInfo:
        stat = path.stat()
        return FileInfo(
            path=path,
            relative_path=relative_path,
            size=0 if is_directory else stat.st_size,
            mtime=stat.st_mtime,
            is_directory=is_directory,
        )



class FileCollector:
    """文件收集器

    对多个根目录执行同一个选择规则，并统计收集结果。
    """

    def __init__(self, selector: Optional[Selector] = None, dirs: bool = False):
        self.selector = selector
        self.dirs = dirs
        self.collected_files: List[FileInfo] = []
        self.total_size: int = 0

    def collect(self, roots: Iterable[Union[str, Path]]) -> List[FileInfo]:
        """收集多个根目录下的匹配项

        Args:
            roots: 根目录列表，不存在的根目录会被忽略

        Returns:
            List[FileInfo]: 按根目录顺序拼接的收集结果
        """
        self.collected_files = []
        self.total_size = 0

        for root in roots:
            for file_info in FileCollection(root, self.selector, self.dirs):
                self.collected_files.append(file_info)
                if not file_info.is_directory:
                    self.total_size += file_info.size

        return self.collected_files

    def get_statistics(self) -> Dict[str, int]:
        """获取收集统计信息"""
        file_count = sum(1 for f in self.collected_files if not f.is_directory)
        return {
            'total_files': file_count,
            'total_directories': len(self.collected_files) - file_count,
            'total_size': self.total_size,
        }


def collect_files(
    root: Union[str, Path],
    selector: Optional[Selector] = None,
    dirs: bool = False,
) -> FileCollection:
    """便捷函数：收集 root 下的文件

    Args:
        root: 根目录
        selector: 文件选择谓词，None 表示全部文件
        dirs: 是否同时产出目录（包括根目录本身）

    Returns:
        FileCollection: 可重复遍历的收集结果
    """
    return FileCollection(root, selector, dirs)
