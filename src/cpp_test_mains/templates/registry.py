"""测试入口模板注册表.

每个 (测试框架, 入口样式) 组合对应且仅对应一份模板，
模板内容在注册后不可修改。
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateSyntaxError, UndefinedError

from cpp_test_mains.exceptions import (
    DuplicateTemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from cpp_test_mains.models import FRAMEWORK_PROFILES, MainStyle, TemplateKey, TestFramework
from cpp_test_mains.utils import get_logger

logger = get_logger("registry")

FrameworkLike = Union[str, TestFramework]
StyleLike = Union[str, MainStyle]

# int main(...) 与 auto main() -> int，允许返回类型与函数名分行
_MAIN_DEFINITION = re.compile(r"\b(?:int|auto)\s+main\s*\(")
_INCLUDE_LINE = r'^[ \t]*#[ \t]*include[ \t]*[<"]{header}[>"]'
_COMMENTS_AND_LITERALS = re.compile(
    r"//[^\n]*"
    r"|/\*.*?\*/"
    r'|"(?:\\.|[^"\\\n])*"'
    r"|'(?:\\.|[^'\\\n])*'",
    re.DOTALL,
)
_PAIRS = {")": "(", "]": "[", "}": "{"}


@dataclass(frozen=True)
class TestMainTemplate:
    """测试入口模板."""

    __test__ = False

    framework: TestFramework
    style: MainStyle
    content: str
    description: str = ""
    source: str = "builtin"
    author: str = ""
    version: str = "1.0.0"

    @property
    def name(self) -> str:
        return f"{self.framework.value}/{self.style.value}"

    @property
    def key(self) -> TemplateKey:
        return (self.framework, self.style)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "framework": self.framework.value,
            "style": self.style.value,
            "description": self.description,
            "source": self.source,
            "author": self.author,
            "version": self.version,
            "content": self.content,
        }


def count_main_definitions(content: str) -> int:
    """统计显式 main 函数定义数量 (忽略注释与字符串)."""
    return len(_MAIN_DEFINITION.findall(strip_comments_and_literals(content)))


def strip_comments_and_literals(content: str) -> str:
    """去除 C++ 注释、字符串与字符字面量."""
    return _COMMENTS_AND_LITERALS.sub(
        lambda m: "\n" * m.group(0).count("\n"), content
    )


def find_unbalanced_delimiters(content: str) -> Optional[str]:
    """检查括号是否配对，返回首个问题描述."""
    stack: List[str] = []
    for line_no, line in enumerate(strip_comments_and_literals(content).splitlines(), 1):
        for char in line:
            if char in "([{":
                stack.append(char)
            elif char in _PAIRS:
                if not stack or stack[-1] != _PAIRS[char]:
                    return f"unexpected '{char}' on line {line_no}"
                stack.pop()
    if stack:
        return f"unclosed '{stack[-1]}'"
    return None


def validate_template(template: TestMainTemplate) -> List[str]:
    """校验模板内容，返回问题列表 (为空表示通过)."""
    problems: List[str] = []

    if not template.content.strip():
        return ["template content is empty"]

    profile = FRAMEWORK_PROFILES[template.framework]
    include = re.compile(_INCLUDE_LINE.format(header=re.escape(profile.header)), re.MULTILINE)
    if not include.search(template.content):
        problems.append(f"missing include of {profile.display_name} header '{profile.header}'")

    for marker in profile.required_markers(template.style):
        if marker not in template.content:
            problems.append(f"missing marker '{marker}'")

    main_count = count_main_definitions(template.content)
    expected = 1 if template.style.defines_main else 0
    if main_count != expected:
        problems.append(
            f"expected {expected} main definition(s) for {template.style.value}, found {main_count}"
        )

    delimiter_problem = find_unbalanced_delimiters(template.content)
    if delimiter_problem:
        problems.append(delimiter_problem)

    return problems


class TemplateRegistry:
    """测试入口模板注册表."""

    def __init__(self):
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._templates: Dict[TemplateKey, TestMainTemplate] = {}

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, key: Any) -> bool:
        try:
            return self._resolve_key(*key) in self._templates
        except (TemplateNotFoundError, TypeError, ValueError):
            return False

    @staticmethod
    def _resolve_key(framework: FrameworkLike, style: StyleLike) -> TemplateKey:
        """将输入解析为注册表键.

        Raises:
            TemplateNotFoundError: 框架或样式未知
        """
        try:
            return (TestFramework.parse(framework), MainStyle.parse(style))
        except ValueError:
            raise TemplateNotFoundError(
                f"Template not found: {_label(framework)}/{_label(style)}",
                framework=_label(framework),
                style=_label(style),
            )

    def register_template(self, template: TestMainTemplate, replace: bool = False) -> None:
        """注册模板.

        Raises:
            DuplicateTemplateError: 组合已注册且未允许替换
        """
        if template.key in self._templates and not replace:
            raise DuplicateTemplateError(
                f"Template already registered: {template.name}",
                template_name=template.name,
            )
        self._templates[template.key] = template
        logger.debug("Registered template %s (%s)", template.name, template.source)

    def get(self, framework: FrameworkLike, style: StyleLike) -> TestMainTemplate:
        """获取模板记录.

        Raises:
            TemplateNotFoundError: 组合未注册
        """
        key = self._resolve_key(framework, style)
        template = self._templates.get(key)
        if template is None:
            raise TemplateNotFoundError(
                f"Template not found: {key[0].value}/{key[1].value}",
                framework=key[0].value,
                style=key[1].value,
            )
        return template

    def get_template(self, framework: FrameworkLike, style: StyleLike) -> str:
        """获取模板内容.

        Raises:
            TemplateNotFoundError: 组合未注册
        """
        return self.get(framework, style).content

    def list_templates(
        self,
        framework: Optional[FrameworkLike] = None,
        style: Optional[StyleLike] = None,
    ) -> List[TestMainTemplate]:
        """列出模板 (按注册顺序)."""
        templates = list(self._templates.values())

        if framework is not None:
            wanted_framework = self._resolve_key(framework, MainStyle.AUTO_MAIN)[0]
            templates = [t for t in templates if t.framework is wanted_framework]

        if style is not None:
            wanted_style = self._resolve_key(TestFramework.CATCH2, style)[1]
            templates = [t for t in templates if t.style is wanted_style]

        return templates

    def render(
        self,
        framework: FrameworkLike,
        style: StyleLike,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """渲染模板.

        未提供变量时直接返回原内容 (逐字节一致，不经过 Jinja2)；
        提供变量时保持模板原有的换行风格。

        Raises:
            TemplateNotFoundError: 组合未注册
            TemplateRenderError: 模板语法错误或变量缺失
        """
        template = self.get(framework, style)
        if not context:
            return template.content

        newline = "\r\n" if "\r\n" in template.content else "\n"
        try:
            env = self.env.overlay(newline_sequence=newline)
            jinja_template = env.from_string(template.content)
            return jinja_template.render(**context)
        except TemplateSyntaxError as e:
            raise TemplateRenderError(
                f"Template syntax error: {e}",
                template_name=template.name,
                context=context,
            )
        except UndefinedError as e:
            raise TemplateRenderError(
                f"Undefined variable: {e}",
                template_name=template.name,
                context=context,
            )


def _label(value: Any) -> str:
    if isinstance(value, (TestFramework, MainStyle)):
        return value.value
    return str(value)
