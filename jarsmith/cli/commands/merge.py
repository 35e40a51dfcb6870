"""
Merge 命令实现

不经过配置文件，直接把一个 jar 和若干依赖合并为 uber jar。
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...build.archive import ArchiveWriter
from ...build.uber import UberAssembler
from ...errors import BuildError
from ...utils.logging import set_log_level, OutputLevel
from ...utils.paths import delete_tree, get_temp_dir


console = Console()


def merge_command(
    primary: str = typer.Argument(..., help="项目 jar，其 Manifest 会原样保留"),
    dependencies: Optional[List[str]] = typer.Argument(None, help="依赖的 jar、文件或目录，按顺序展开"),
    output: str = typer.Option(..., "--output", "-o", help="输出 uber jar 路径"),
    staging_dir: Optional[str] = typer.Option(None, "--staging-dir", help="暂存目录，默认使用临时目录"),
    store: bool = typer.Option(False, "--store", help="只存储不压缩"),
    force: bool = typer.Option(False, "--force", "-f", help="强制覆盖已存在的输出文件和非空暂存目录"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """合并 uber jar

    依赖先展开，项目 jar 最后展开，同名文件以项目 jar 为准。

    示例:
        jarsmith merge target/app-1.0.jar libs/a.jar libs/b.jar -o app.jar
    """
    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[red]输出文件已存在: {escape(str(output_path))}[/red]")
        console.print("使用 --force 参数强制覆盖")
        raise typer.Exit(1)

    # 指定的暂存目录会被清空，非空时需要 --force
    if staging_dir is not None and not force:
        existing = Path(staging_dir)
        if existing.is_file() or (existing.is_dir() and any(existing.iterdir())):
            console.print(f"[red]暂存目录不为空: {escape(str(existing))}[/red]")
            console.print("暂存目录会被清空，使用 --force 参数确认")
            raise typer.Exit(1)

    # 未指定暂存目录时使用临时目录，结束后删除
    temporary = staging_dir is None
    staging_path = get_temp_dir(prefix="jarsmith_uber_") if temporary else Path(staging_dir)

    assembler = UberAssembler(writer=ArchiveWriter(compress=not store))
    try:
        result = assembler.assemble(primary, dependencies or [], output_path, staging_path)
    except (BuildError, OSError) as e:
        console.print(f"[red]✗ 合并失败[/red]: {escape(str(e))}")
        if not temporary:
            console.print(f"[yellow]暂存目录保留在 {escape(str(staging_path))}[/yellow]")
        raise typer.Exit(1)
    finally:
        if temporary:
            delete_tree(staging_path)

    console.print(f"[green]✓ 合并完成[/green]: {escape(str(output_path))} ({result.entry_count} 个条目)")
    if result.conflicts:
        console.print(f"[yellow]共 {len(result.conflicts)} 处路径冲突[/yellow]")
        for conflict in result.conflicts:
            console.print(f"  {escape(conflict)}")
