"""
Validate 命令实现

验证配置文件的命令。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...build.build_pipeline import BuildPipeline
from ...config import validate_config, load_config, ConfigError


console = Console()


def validate_command(
    config: str = typer.Option("build.yaml", "--config", "-c", help="配置文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式的错误信息"),
    show_warnings: bool = typer.Option(True, "--warnings/--no-warnings", help="显示警告信息")
) -> None:
    """验证配置文件

    检查配置文件的语法和语义正确性。

    示例:
        jarsmith validate -c build.yaml
        jarsmith validate -c build.yaml --json
    """
    config_path = Path(config)

    if not config_path.exists():
        console.print(f"[red]配置文件不存在: {config_path}[/red]")
        raise typer.Exit(1)

    if not json_output:
        console.print(f"正在验证配置文件: [cyan]{config_path}[/cyan]")

    errors = validate_config(config_path)

    if not errors:
        if json_output:
            typer.echo(json.dumps({"file": str(config_path), "errors": [], "error_count": 0},
                                  ensure_ascii=False, indent=2))
            return
        console.print("[green]✓ 配置文件验证通过[/green]")
        if show_warnings:
            _print_warnings(config_path)
        return

    if json_output:
        error_data = {
            "file": str(config_path),
            "errors": errors,
            "error_count": len(errors)
        }
        typer.echo(json.dumps(error_data, ensure_ascii=False, indent=2, default=str))
    else:
        console.print(f"[red]配置文件验证失败 ({len(errors)} 个错误):[/red]")
        console.print()

        table = Table(title="验证错误")
        table.add_column("位置", style="cyan", no_wrap=True)
        table.add_column("错误信息", style="red")
        table.add_column("输入值", style="yellow")

        for error in errors:
            location = " -> ".join(str(item) for item in error.get('loc', []))
            message = error.get('msg', '未知错误')
            input_value = str(error.get('input', ''))

            if len(input_value) > 47:
                input_value = input_value[:47] + "..."

            table.add_row(
                location or "根级别",
                message,
                input_value or "-"
            )

        console.print(table)

    raise typer.Exit(1)


def _print_warnings(config_path: Path) -> None:
    """输出不影响构建但值得注意的问题"""
    try:
        config_obj = load_config(config_path)
        pipeline = BuildPipeline.from_tasks(config_obj.tasks)
    except ConfigError:
        return

    warnings = pipeline.validate_pipeline()
    if not config_obj.src_pom.exists() and "sync-pom" in config_obj.tasks:
        warnings.append(f"POM 文件不存在: {config_obj.src_pom}")
    for path in config_obj.lib_paths():
        if not path.exists():
            warnings.append(f"依赖路径不存在: {path}")

    for message in warnings:
        console.print(f"[yellow]警告: {message}[/yellow]")
