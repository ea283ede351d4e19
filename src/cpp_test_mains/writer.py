"""测试入口文件写入."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from cpp_test_mains.config import settings
from cpp_test_mains.exceptions import TemplateWriteError
from cpp_test_mains.templates.registry import FrameworkLike, StyleLike, TemplateRegistry
from cpp_test_mains.utils import get_logger

logger = get_logger("writer")


def _validate_file_name(file_name: str) -> None:
    """文件名只能是单个路径组件.

    Raises:
        TemplateWriteError: 文件名为空、包含路径分隔符、父目录引用或空字节
    """
    if not file_name or file_name in (".", ".."):
        raise TemplateWriteError("文件名不能为空", path=file_name, reason="empty")
    if "\x00" in file_name:
        raise TemplateWriteError("文件名包含空字节", path=file_name, reason="null_byte")
    if "/" in file_name or "\\" in file_name:
        raise TemplateWriteError(
            f"文件名不能包含路径: {file_name}", path=file_name, reason="traversal"
        )


def write_test_main(
    registry: TemplateRegistry,
    framework: FrameworkLike,
    style: StyleLike,
    dest_dir: Union[str, Path],
    file_name: Optional[str] = None,
    overwrite: bool = False,
    context: Optional[Dict[str, Any]] = None,
) -> Path:
    """将模板写入目标目录下的单个文件.

    Args:
        registry: 模板注册表
        framework: 测试框架
        style: 入口样式
        dest_dir: 已存在的目标目录
        file_name: 文件名，默认使用配置中的 test_main_file_name
        overwrite: 是否覆盖已有文件
        context: 模板变量

    Returns:
        Path: 写入的文件路径

    Raises:
        TemplateNotFoundError: 组合未注册
        TemplateWriteError: 目标无效或写入失败
    """
    file_name = file_name or settings.test_main_file_name
    _validate_file_name(file_name)

    template = registry.get(framework, style)

    dest = Path(dest_dir)
    if not dest.is_dir():
        raise TemplateWriteError(
            f"目标目录不存在: {dest}",
            template_name=template.name,
            path=str(dest),
            reason="missing_directory",
        )

    target = dest / file_name
    if target.exists() and not overwrite:
        raise TemplateWriteError(
            f"文件已存在: {target}",
            template_name=template.name,
            path=str(target),
            reason="exists",
        )

    content = registry.render(template.framework, template.style, context)

    try:
        target.write_bytes(content.encode("utf-8"))
    except OSError as e:
        raise TemplateWriteError(
            f"写入失败: {e}",
            template_name=template.name,
            path=str(target),
            reason="io_error",
        )

    logger.info("Wrote %s to %s", template.name, target)
    return target
