"""
Build 命令实现

按任务列表执行构建管道。
"""

import traceback
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...config import load_config, ConfigError, ConfigValidationError
from ...utils.logging import set_log_level, set_log_file, OutputLevel


console = Console()


def build_command(
    tasks: Optional[List[str]] = typer.Argument(None, help="要执行的任务，默认使用配置中的 tasks"),
    config: str = typer.Option("build.yaml", "--config", "-c", help="配置文件路径"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """按任务执行构建

    任务按给出的顺序执行，遇到 end 任务时提前结束。

    示例:
        jarsmith build -c build.yaml
        jarsmith build -c build.yaml clean javac jar
    """
    from ...build.builder import Builder

    config_path = Path(config)

    # 初始化日志：在任何输出前设置
    if verbose:
        set_log_level(OutputLevel.DEBUG)
    else:
        set_log_level(OutputLevel.INFO)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    try:
        console.print(f"[cyan]正在加载配置文件[/cyan]: {config_path}")
        config_obj = load_config(config_path)
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {escape(str(e))}")
        raise typer.Exit(1)

    builder = Builder()
    try:
        result = builder.build(config_obj, tasks or None)
    except Exception as e:
        console.print(f"[red]✗ 构建过程中发生意外错误[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{escape(traceback.format_exc())}")
        raise typer.Exit(1)

    if not result.success:
        console.print(f"[red]✗ 构建失败[/red]: {escape(str(result.error))}")
        if log_file:
            console.print(f"[yellow]请检查日志文件 {log_file} 获取详细信息。[/yellow]")
        raise typer.Exit(1)

    console.print(f"[green]✓ 构建完成[/green]: {', '.join(result.executed) or '没有执行任何任务'}")
    if result.terminated_by:
        console.print(f"[blue]管道在任务 {result.terminated_by} 处结束[/blue]")

    if result.artifacts:
        table = Table(title="构建产物")
        table.add_column("名称", style="cyan")
        table.add_column("路径", style="green")
        for name, path in result.artifacts.items():
            table.add_row(name, str(path))
        console.print(table)

    if result.conflicts:
        console.print(f"[yellow]合并时共有 {len(result.conflicts)} 处路径冲突[/yellow]")
        if verbose:
            for conflict in result.conflicts:
                console.print(f"  {conflict}", markup=False)
