"""
路径工具

提供目录创建、删除以及安全拼接等路径处理函数。
"""

import shutil
import tempfile
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def delete_tree(path: Union[str, Path]) -> bool:
    """删除文件或整个目录树

    路径不存在时什么也不做。

    Args:
        path: 要删除的路径

    Returns:
        bool: 是否实际删除了内容
    """
    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
        return True
    if target.exists() or target.is_symlink():
        target.unlink()
        return True
    return False


def get_temp_dir(prefix: str = "jarsmith_") -> Path:
    """创建临时目录"""
    return Path(tempfile.mkdtemp(prefix=prefix))


def safe_path_join(*parts: Union[str, Path]) -> Path:
    """安全的路径拼接（防止目录穿越）

    Args:
        *parts: 路径部分，第一个为基准目录

    Returns:
        Path: 拼接后的路径

    Raises:
        ValueError: 检测到目录穿越或绝对路径
    """
    if not parts:
        return Path(".")

    result = Path(parts[0])

    for part in parts[1:]:
        part_str = str(part).replace('\\', '/')
        part_path = Path(part_str)

        if any(p == ".." for p in part_path.parts):
            raise ValueError(f"检测到目录穿越尝试: {part}")

        if part_path.is_absolute() or part_str.startswith('/'):
            raise ValueError(f"不允许使用绝对路径: {part}")

        result = result / part_path

    return result


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
