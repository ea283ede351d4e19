"""模板管理器: 内置模板与用户自定义模板."""

from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml

from cpp_test_mains.config import settings
from cpp_test_mains.exceptions import (
    ConfigurationError,
    TemplateError,
    TemplateValidationError,
)
from cpp_test_mains.models import MainStyle, TemplateKey, TestFramework
from cpp_test_mains.templates.registry import (
    FrameworkLike,
    StyleLike,
    TemplateRegistry,
    TestMainTemplate,
    validate_template,
)
from cpp_test_mains.utils import get_logger

logger = get_logger("template_manager")

BUILTIN_TEMPLATE_PACKAGE = "cpp_test_mains.templates"
BUILTIN_TEMPLATE_DIR = "cpp_test_mains"
CUSTOM_TEMPLATE_SUFFIXES = (".yaml", ".yml")

BUILTIN_DESCRIPTIONS: Dict[TemplateKey, str] = {
    (TestFramework.CATCH2, MainStyle.AUTO_MAIN): "Catch2 测试 (使用 Catch2WithMain 提供的 main)",
    (TestFramework.CATCH2, MainStyle.CUSTOM_MAIN): "Catch2 测试 (自定义 Catch::Session main)",
    (TestFramework.DOCTEST, MainStyle.AUTO_MAIN): "doctest 测试 (DOCTEST_CONFIG_IMPLEMENT_WITH_MAIN)",
    (TestFramework.DOCTEST, MainStyle.CUSTOM_MAIN): "doctest 测试 (自定义 doctest::Context main)",
    (TestFramework.GOOGLETEST, MainStyle.AUTO_MAIN): "GoogleTest 测试 (使用 gtest_main)",
    (TestFramework.GOOGLETEST, MainStyle.CUSTOM_MAIN): "GoogleTest 测试 (自定义 InitGoogleTest main)",
}


def read_builtin_template(framework: TestFramework, style: MainStyle) -> str:
    """读取内置模板资源 (不做换行转换)."""
    resource = resources.files(BUILTIN_TEMPLATE_PACKAGE).joinpath(
        BUILTIN_TEMPLATE_DIR, framework.value, f"{style.value}.cpp"
    )
    return resource.read_bytes().decode("utf-8")


class TemplateManager:
    """模板管理器."""

    def __init__(
        self,
        custom_templates_dir: Optional[str] = None,
        default_framework: Optional[str] = None,
        default_style: Optional[str] = None,
    ):
        self.registry = TemplateRegistry()
        self.custom_templates_dir = custom_templates_dir
        self.default_framework = TestFramework.parse(
            default_framework or settings.default_test_framework
        )
        self.default_style = MainStyle.parse(default_style or settings.default_main_style)
        self._custom_keys: Set[TemplateKey] = set()
        self._load_builtin_templates()
        self._load_custom_templates()

    def _load_builtin_templates(self) -> None:
        """加载内置模板."""
        for framework in TestFramework:
            for style in MainStyle:
                self.registry.register_template(TestMainTemplate(
                    framework=framework,
                    style=style,
                    content=read_builtin_template(framework, style),
                    description=BUILTIN_DESCRIPTIONS[(framework, style)],
                ))

    def _load_custom_templates(self) -> None:
        """加载用户自定义模板.

        自定义模板替换同一组合的内置模板；同一目录内重复的组合只保留首个。
        """
        if not self.custom_templates_dir:
            return

        templates_dir = Path(self.custom_templates_dir)
        if not templates_dir.is_dir():
            logger.warning("Custom templates directory does not exist: %s", templates_dir)
            return

        for template_file in sorted(templates_dir.iterdir()):
            if not template_file.is_file() or template_file.suffix not in CUSTOM_TEMPLATE_SUFFIXES:
                continue
            try:
                template = self._load_template_file(template_file)
            except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError, TemplateError) as e:
                logger.warning("Failed to load template %s: %s", template_file, e)
                continue

            if template.key in self._custom_keys:
                logger.warning(
                    "Skipping %s: template %s already provided by another custom file",
                    template_file, template.name,
                )
                continue

            self.registry.register_template(template, replace=True)
            self._custom_keys.add(template.key)
            logger.info("Loaded custom template %s from %s", template.name, template_file)

    def _load_template_file(self, template_file: Path) -> TestMainTemplate:
        """从 YAML 文件加载模板.

        Raises:
            TemplateValidationError: 模板内容未通过校验
        """
        with open(template_file, "r", encoding="utf-8", newline="") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise TypeError("template file must contain a mapping")
        content = data["template"]
        if not isinstance(content, str):
            raise TypeError(f"'template' must be a string, got {type(content).__name__}")

        template = TestMainTemplate(
            framework=TestFramework.parse(data["framework"]),
            style=MainStyle.parse(data["style"]),
            content=content,
            description=str(data.get("description") or ""),
            source=str(template_file),
            author=str(data.get("author") or ""),
            version=str(data.get("version", "1.0.0")),
        )
        _ensure_valid(template)
        return template

    def is_custom(self, framework: FrameworkLike, style: StyleLike) -> bool:
        return self.registry.get(framework, style).key in self._custom_keys

    def get(self, framework: FrameworkLike, style: StyleLike) -> TestMainTemplate:
        """获取模板记录."""
        return self.registry.get(framework, style)

    def get_default(
        self,
        framework: Optional[FrameworkLike] = None,
        style: Optional[StyleLike] = None,
    ) -> TestMainTemplate:
        """获取模板记录，未指定的框架或样式使用默认配置."""
        return self.registry.get(framework or self.default_framework, style or self.default_style)

    def get_template(self, framework: FrameworkLike, style: StyleLike) -> str:
        """获取模板内容."""
        return self.registry.get_template(framework, style)

    def list_templates(
        self,
        framework: Optional[FrameworkLike] = None,
        style: Optional[StyleLike] = None,
    ) -> List[TestMainTemplate]:
        """列出模板."""
        return self.registry.list_templates(framework, style)

    def render_template(
        self,
        framework: FrameworkLike,
        style: StyleLike,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """渲染模板."""
        return self.registry.render(framework, style, context)

    def select_template(
        self,
        requires_custom_main: bool = False,
        framework: Optional[FrameworkLike] = None,
    ) -> TestMainTemplate:
        """为测试项目选择模板.

        Args:
            requires_custom_main: 测试是否需要自带 main
            framework: 测试框架，默认使用配置中的框架
        """
        style = MainStyle.from_requires_custom_main(requires_custom_main)
        return self.registry.get(framework or self.default_framework, style)

    def validate_all(self) -> Dict[str, List[str]]:
        """校验全部模板，返回 {模板名: 问题列表}."""
        return {
            template.name: validate_template(template)
            for template in self.registry.list_templates()
        }

    def create_custom_template(
        self,
        framework: FrameworkLike,
        style: StyleLike,
        template_content: str,
        description: str = "",
        author: str = "",
    ) -> Path:
        """创建自定义模板并注册.

        Returns:
            Path: 写入的 YAML 文件路径

        Raises:
            ConfigurationError: 未配置自定义模板目录
            TemplateValidationError: 模板内容未通过校验
        """
        if not self.custom_templates_dir:
            raise ConfigurationError("未配置自定义模板目录", config_key="custom_templates_dir")

        resolved_framework = TestFramework.parse(framework)
        resolved_style = MainStyle.parse(style)

        templates_dir = Path(self.custom_templates_dir)
        template_file = templates_dir / f"{resolved_framework.value}-{resolved_style.value}.yaml"

        template = TestMainTemplate(
            framework=resolved_framework,
            style=resolved_style,
            content=template_content,
            description=description,
            source=str(template_file),
            author=author,
        )
        _ensure_valid(template)

        templates_dir.mkdir(parents=True, exist_ok=True)
        template_data = {
            "framework": resolved_framework.value,
            "style": resolved_style.value,
            "description": description,
            "author": author,
            "version": template.version,
            "template": template_content,
        }
        with open(template_file, "w", encoding="utf-8", newline="") as f:
            yaml.safe_dump(template_data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)

        self.registry.register_template(template, replace=True)
        self._custom_keys.add(template.key)
        logger.info("Created custom template %s at %s", template.name, template_file)
        return template_file


def _ensure_valid(template: TestMainTemplate) -> None:
    problems = validate_template(template)
    if problems:
        raise TemplateValidationError(
            f"Invalid template {template.name}: {'; '.join(problems)}",
            template_name=template.name,
            problems=problems,
        )


_manager: Optional[TemplateManager] = None


def get_manager() -> TemplateManager:
    """获取全局模板管理器 (按当前配置延迟创建)."""
    global _manager
    if _manager is None:
        _manager = TemplateManager(custom_templates_dir=settings.custom_templates_dir)
    return _manager


def get_template(framework: FrameworkLike, style: StyleLike) -> str:
    """获取 (框架, 样式) 对应的模板内容.

    Raises:
        TemplateNotFoundError: 组合未注册
    """
    return get_manager().get_template(framework, style)
