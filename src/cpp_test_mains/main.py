"""CLI 入口模块."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from cpp_test_mains import __version__
from cpp_test_mains.config import settings
from cpp_test_mains.exceptions import CppTestMainsError
from cpp_test_mains.models import get_profile
from cpp_test_mains.templates import TemplateManager
from cpp_test_mains.utils import setup_logging
from cpp_test_mains.writer import write_test_main

app = typer.Typer(
    name="cpp-test-mains",
    help="C++ 测试框架入口模板管理工具",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """版本回调."""
    if value:
        console.print(f"[bold blue]cpp-test-mains[/bold blue] version {__version__}")
        raise typer.Exit()


def _fail(error: CppTestMainsError) -> None:
    console.print(f"[red]错误: {error.message}[/red]", markup=True, highlight=False)
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    templates_dir: Optional[Path] = typer.Option(
        None, "--templates-dir", "-d",
        help="自定义模板目录 (默认读取配置)",
        file_okay=False, dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="输出调试日志"),
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
) -> None:
    """cpp-test-mains: Catch2 / doctest / GoogleTest 入口模板."""
    setup_logging(
        level=logging.DEBUG if verbose else settings.log_level_value,
        log_file=settings.log_file,
    )
    custom_dir = str(templates_dir) if templates_dir else settings.custom_templates_dir
    ctx.obj = TemplateManager(custom_templates_dir=custom_dir)


@app.command(name="list")
def list_templates(
    ctx: typer.Context,
    framework: Optional[str] = typer.Option(
        None, "--framework", "-f", help="按测试框架过滤 (catch2/doctest/googletest)"
    ),
) -> None:
    """列出已注册的模板."""
    manager: TemplateManager = ctx.obj

    try:
        templates = manager.list_templates(framework=framework)
    except CppTestMainsError as e:
        _fail(e)

    table = Table(box=box.ROUNDED)
    table.add_column("框架", style="cyan", no_wrap=True)
    table.add_column("样式", style="green", no_wrap=True)
    table.add_column("名称", no_wrap=True)
    table.add_column("来源", style="yellow")
    table.add_column("行数", justify="right")
    table.add_column("描述")

    for template in templates:
        table.add_row(
            template.framework.value,
            template.style.value,
            get_profile(template.framework).display_name,
            "自定义" if manager.is_custom(template.framework, template.style) else "内置",
            str(len(template.content.splitlines())),
            template.description,
        )

    console.print(table)


@app.command(name="show")
def show_template(
    ctx: typer.Context,
    framework: Optional[str] = typer.Argument(None, help="测试框架 (默认读取配置)"),
    style: Optional[str] = typer.Argument(None, help="入口样式 auto_main/custom_main (默认读取配置)"),
) -> None:
    """输出模板原文."""
    manager: TemplateManager = ctx.obj

    try:
        template = manager.get_default(framework, style)
    except CppTestMainsError as e:
        _fail(e)

    typer.echo(template.content, nl=False)


@app.command(name="check")
def check_templates(ctx: typer.Context) -> None:
    """校验所有模板."""
    manager: TemplateManager = ctx.obj

    console.print(Panel.fit(
        "[bold blue]🔍 模板校验[/bold blue]",
        border_style="blue"
    ))

    results = manager.validate_all()

    table = Table(box=box.ROUNDED)
    table.add_column("模板", style="cyan", no_wrap=True)
    table.add_column("状态", style="green")
    table.add_column("信息", style="yellow")

    for name, problems in results.items():
        table.add_row(
            name,
            "[red]✗[/red]" if problems else "[green]✓[/green]",
            "; ".join(problems) if problems else "OK",
        )

    console.print(table)

    if any(results.values()):
        raise typer.Exit(1)


@app.command(name="write")
def write_template(
    ctx: typer.Context,
    dest: Path = typer.Argument(
        ..., help="目标目录", exists=True, file_okay=False, dir_okay=True
    ),
    framework: Optional[str] = typer.Option(
        None, "--framework", "-f", help="测试框架 (默认读取配置)"
    ),
    style: Optional[str] = typer.Option(
        None, "--style", "-s", help="入口样式 auto_main/custom_main (默认读取配置)"
    ),
    file_name: Optional[str] = typer.Option(
        None, "--file-name", "-o", help="文件名 (默认读取配置)"
    ),
    force: bool = typer.Option(False, "--force", help="覆盖已存在的文件"),
) -> None:
    """将模板写入目标目录."""
    manager: TemplateManager = ctx.obj

    try:
        template = manager.get_default(framework, style)
        target = write_test_main(
            manager.registry,
            template.framework,
            template.style,
            dest,
            file_name=file_name,
            overwrite=force,
        )
    except CppTestMainsError as e:
        _fail(e)

    console.print(f"[green]已生成 {target}[/green]")


if __name__ == "__main__":
    app()
