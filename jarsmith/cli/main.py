"""
jarsmith CLI 主入口

提供命令行接口，支持 build/validate/inspect/merge 等命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..build.steps import STEP_REGISTRY
from .commands import build, validate, inspect, merge


# 创建主应用
app = typer.Typer(
    name="jarsmith",
    help="jarsmith - Java 构建任务管道与 uber jar 合并工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"jarsmith v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
) -> None:
    """jarsmith - Java 构建任务管道与 uber jar 合并工具

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="按任务执行构建")(build.build_command)
app.command("validate", help="验证配置文件")(validate.validate_command)
app.command("inspect", help="查看 jar 的 Manifest 和条目")(inspect.inspect_command)
app.command("merge", help="把 jar 和依赖合并为 uber jar")(merge.merge_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    from ..build.manifest import detect_jdk_spec

    console.print("[bold]jarsmith 系统信息[/bold]")
    console.print()

    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")

    table.add_row("jarsmith", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("JDK", detect_jdk_spec() or "未检测到")

    console.print(table)
    console.print()

    task_table = Table(title="可用任务")
    task_table.add_column("任务", style="cyan")
    task_table.add_column("说明", style="green")

    for name, factory in STEP_REGISTRY.items():
        task_table.add_row(name, factory().description)

    console.print(task_table)


if __name__ == "__main__":
    app()
