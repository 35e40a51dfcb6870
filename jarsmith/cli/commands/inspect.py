"""
Inspect 命令实现

查看 jar 的 Manifest 和条目列表。
"""

import json
import zipfile
import zlib
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...build.manifest import MANIFEST_NAME, read_manifest
from ...errors import ArchiveReadError
from ...utils.paths import format_size


console = Console()


def inspect_command(
    archive: str = typer.Argument(..., help="jar/zip 文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
    show_entries: bool = typer.Option(False, "--entries", help="显示条目列表"),
) -> None:
    """查看 jar 信息

    显示 Manifest 属性、条目数量，以及可选的条目列表。

    示例:
        jarsmith inspect target/app-1.0.jar
        jarsmith inspect target/app-1.0-standalone.jar --entries
        jarsmith inspect target/app-1.0.jar --json
    """
    archive_path = Path(archive)

    if not archive_path.is_file():
        console.print(f"[red]文件不存在: {escape(str(archive_path))}[/red]")
        raise typer.Exit(1)

    try:
        data = _read_archive_info(archive_path)
    except ArchiveReadError as e:
        console.print(f"[red]读取归档失败: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        if not show_entries:
            data.pop("entries")
        typer.echo(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        _display_archive_info(data, show_entries)


def _read_archive_info(archive_path: Path) -> Dict[str, Any]:
    """读取 Manifest 和条目信息"""
    manifest = read_manifest(archive_path)

    try:
        with zipfile.ZipFile(archive_path, 'r') as zf:
            infos = zf.infolist()
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise ArchiveReadError(f"无法读取归档 {archive_path}: {e}") from e

    entries = [
        {
            "name": info.filename,
            "size": info.file_size,
            "compressed_size": info.compress_size,
            "is_directory": info.is_dir(),
            "date_time": datetime(*info.date_time).isoformat(),
        }
        for info in infos
    ]

    return {
        "file": str(archive_path),
        "size": archive_path.stat().st_size,
        "manifest_first": bool(infos) and infos[0].filename == MANIFEST_NAME,
        "manifest": _manifest_dict(manifest),
        "entry_count": len(entries),
        "file_count": sum(1 for e in entries if not e["is_directory"]),
        "entries": entries,
    }


def _manifest_dict(manifest) -> Optional[Dict[str, Any]]:
    if manifest is None:
        return None
    return {
        "main": dict(manifest.main_attributes.items()),
        "entries": {name: dict(attrs.items()) for name, attrs in manifest.entries.items()},
    }


def _display_archive_info(data: Dict[str, Any], show_entries: bool) -> None:
    """显示归档信息（人类可读格式）"""
    console.print(f"[bold]{escape(data['file'])}[/bold]")
    console.print()

    basic_table = Table(title="基本信息")
    basic_table.add_column("属性", style="cyan")
    basic_table.add_column("值", style="green")
    basic_table.add_row("文件大小", format_size(data["size"]))
    basic_table.add_row("条目数", str(data["entry_count"]))
    basic_table.add_row("文件数", str(data["file_count"]))
    basic_table.add_row("Manifest 位于首位", "是" if data["manifest_first"] else "否")
    console.print(basic_table)
    console.print()

    manifest = data["manifest"]
    if manifest is None:
        console.print("[yellow]归档中没有 Manifest[/yellow]")
    else:
        manifest_table = Table(title="Manifest")
        manifest_table.add_column("属性", style="cyan")
        manifest_table.add_column("值", style="green")
        for name, value in manifest["main"].items():
            manifest_table.add_row(escape(name), escape(value))
        console.print(manifest_table)
        if manifest["entries"]:
            console.print(f"[dim]另有 {len(manifest['entries'])} 个命名段[/dim]")
    console.print()

    if show_entries and data["entries"]:
        entries_table = Table(title=f"条目列表 ({data['entry_count']} 个条目)")
        entries_table.add_column("路径", style="cyan")
        entries_table.add_column("大小", style="green")
        entries_table.add_column("压缩后", style="green")
        entries_table.add_column("修改时间", style="yellow")

        for entry in data["entries"]:
            entries_table.add_row(
                escape(entry["name"]),
                "-" if entry["is_directory"] else format_size(entry["size"]),
                "-" if entry["is_directory"] else format_size(entry["compressed_size"]),
                entry["date_time"],
            )

        console.print(entries_table)
