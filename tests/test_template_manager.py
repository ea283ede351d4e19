"""模板管理器单元测试."""

import logging
from pathlib import Path

import pytest
import yaml

from cpp_test_mains.exceptions import (
    ConfigurationError,
    TemplateNotFoundError,
    TemplateValidationError,
)
from cpp_test_mains.models import MainStyle, TestFramework
from cpp_test_mains.templates import manager as manager_module
from cpp_test_mains.templates.manager import (
    TemplateManager,
    get_manager,
    get_template,
    read_builtin_template,
)


CUSTOM_CATCH2_AUTO = """#include <catch2/catch_test_macros.hpp>
#include "{{ include_prefix | default('PROJECT') }}/config.hpp"

TEST_CASE( "Custom", "[custom]" ) {
  REQUIRE( 1 + 1 == 2 );
}
"""


def write_yaml(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data, allow_unicode=True, sort_keys=False), encoding="utf-8")
    return path


class TestBuiltinLoading:
    """内置模板加载测试."""

    def test_manager_loads_all_builtins(self):
        """测试加载全部内置模板."""
        manager = TemplateManager()

        assert len(manager.list_templates()) == 6
        assert not any(manager.is_custom(t.framework, t.style) for t in manager.list_templates())

    def test_builtin_resource_matches_registry(self):
        """测试资源文件与注册表内容一致."""
        manager = TemplateManager()

        for framework in TestFramework:
            for style in MainStyle:
                assert manager.get_template(framework, style) == read_builtin_template(framework, style)

    def test_builtin_descriptions(self):
        """测试内置模板带描述."""
        manager = TemplateManager()
        for template in manager.list_templates():
            assert template.description
            assert template.source == "builtin"

    def test_validate_all_builtins(self):
        """测试校验全部内置模板."""
        results = TemplateManager().validate_all()

        assert len(results) == 6
        assert all(problems == [] for problems in results.values())


class TestCustomTemplates:
    """自定义模板测试."""

    def test_custom_template_overrides_builtin(self, tmp_path):
        """测试自定义模板替换内置模板."""
        write_yaml(tmp_path / "catch2-auto.yaml", {
            "framework": "catch2",
            "style": "auto_main",
            "description": "Project flavoured Catch2",
            "author": "QA",
            "template": CUSTOM_CATCH2_AUTO,
        })

        manager = TemplateManager(custom_templates_dir=str(tmp_path))

        template = manager.get("catch2", "auto_main")
        assert template.content == CUSTOM_CATCH2_AUTO
        assert template.author == "QA"
        assert manager.is_custom("catch2", "auto_main")
        assert not manager.is_custom("catch2", "custom_main")
        assert len(manager.list_templates()) == 6

    def test_custom_template_renders_with_context(self, tmp_path):
        """测试自定义模板变量替换."""
        write_yaml(tmp_path / "catch2.yml", {
            "framework": "Catch2",
            "style": "auto_main",
            "template": CUSTOM_CATCH2_AUTO,
        })

        manager = TemplateManager(custom_templates_dir=str(tmp_path))

        assert '#include "MYLIB/config.hpp"' in manager.render_template(
            "catch2", "auto_main", {"include_prefix": "MYLIB"}
        )
        assert '#include "PROJECT/config.hpp"' in manager.render_template(
            "catch2", "auto_main", {"unused": True}
        )
        assert manager.render_template("catch2", "auto_main") == CUSTOM_CATCH2_AUTO

    def test_invalid_template_is_skipped(self, tmp_path, caplog):
        """测试校验失败的模板被跳过."""
        write_yaml(tmp_path / "bad.yaml", {
            "framework": "googletest",
            "style": "custom_main",
            "template": "TEST(A, B) {}\n",
        })

        with caplog.at_level(logging.WARNING, logger="cpp_test_mains"):
            manager = TemplateManager(custom_templates_dir=str(tmp_path))

        assert not manager.is_custom("googletest", "custom_main")
        assert "RUN_ALL_TESTS()" in manager.get_template("googletest", "custom_main")
        assert "Failed to load template" in caplog.text

    def test_unknown_framework_is_skipped(self, tmp_path):
        """测试未知框架的模板被跳过."""
        write_yaml(tmp_path / "boost.yaml", {
            "framework": "boost_test",
            "style": "auto_main",
            "template": "BOOST_AUTO_TEST_CASE(x) {}\n",
        })

        manager = TemplateManager(custom_templates_dir=str(tmp_path))

        assert len(manager.list_templates()) == 6
        with pytest.raises(TemplateNotFoundError):
            manager.get_template("boost_test", "auto_main")

    def test_malformed_files_are_skipped(self, tmp_path):
        """测试格式错误的文件被跳过."""
        (tmp_path / "broken.yaml").write_text("framework: [unclosed\n", encoding="utf-8")
        (tmp_path / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
        write_yaml(tmp_path / "missing.yaml", {"framework": "catch2"})
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        manager = TemplateManager(custom_templates_dir=str(tmp_path))

        assert len(manager.list_templates()) == 6
        assert not any(manager.is_custom(t.framework, t.style) for t in manager.list_templates())

    def test_non_string_template_is_skipped(self, tmp_path, caplog):
        """测试 template 为空或非字符串的文件被跳过."""
        (tmp_path / "a.yaml").write_text(
            "framework: catch2\nstyle: auto_main\ntemplate:\n", encoding="utf-8"
        )
        (tmp_path / "b.yaml").write_text(
            "framework: googletest\nstyle: auto_main\ntemplate: 42\n", encoding="utf-8"
        )

        with caplog.at_level(logging.WARNING, logger="cpp_test_mains"):
            manager = TemplateManager(custom_templates_dir=str(tmp_path))

        assert len(manager.list_templates()) == 6
        assert not manager.is_custom("catch2", "auto_main")
        assert not manager.is_custom("googletest", "auto_main")
        assert "'template' must be a string" in caplog.text

    def test_non_string_metadata_is_coerced(self, tmp_path):
        """测试描述与作者字段转换为字符串."""
        write_yaml(tmp_path / "catch2.yaml", {
            "framework": "catch2",
            "style": "auto_main",
            "template": CUSTOM_CATCH2_AUTO,
            "description": 2024,
            "author": None,
        })

        template = TemplateManager(custom_templates_dir=str(tmp_path)).get("catch2", "auto_main")

        assert template.description == "2024"
        assert template.author == ""

    def test_duplicate_custom_pair_keeps_first(self, tmp_path):
        """测试同一目录内重复组合只保留首个 (按文件名排序)."""
        write_yaml(tmp_path / "a.yaml", {
            "framework": "catch2", "style": "auto_main", "template": CUSTOM_CATCH2_AUTO,
        })
        write_yaml(tmp_path / "b.yaml", {
            "framework": "catch2", "style": "auto_main",
            "template": CUSTOM_CATCH2_AUTO.replace("Custom", "Second"),
        })

        manager = TemplateManager(custom_templates_dir=str(tmp_path))

        assert '"Custom"' in manager.get_template("catch2", "auto_main")
        assert manager.get("catch2", "auto_main").source.endswith("a.yaml")

    def test_missing_directory(self, tmp_path):
        """测试目录不存在时仅使用内置模板."""
        manager = TemplateManager(custom_templates_dir=str(tmp_path / "nope"))
        assert len(manager.list_templates()) == 6

    def test_create_custom_template(self, tmp_path):
        """测试创建自定义模板."""
        templates_dir = tmp_path / "templates"
        manager = TemplateManager(custom_templates_dir=str(templates_dir))

        template_file = manager.create_custom_template(
            framework="catch2",
            style="auto_main",
            template_content=CUSTOM_CATCH2_AUTO,
            description="mine",
        )

        assert template_file == templates_dir / "catch2-auto_main.yaml"
        assert template_file.exists()
        assert manager.get_template("catch2", "auto_main") == CUSTOM_CATCH2_AUTO

        reloaded = TemplateManager(custom_templates_dir=str(templates_dir))
        assert reloaded.get_template("catch2", "auto_main") == CUSTOM_CATCH2_AUTO
        assert reloaded.get("catch2", "auto_main").description == "mine"

    def test_create_custom_template_round_trips_whitespace(self, tmp_path):
        """测试含行尾空白的模板经 YAML 往返后不变."""
        content = read_builtin_template(TestFramework.DOCTEST, MainStyle.CUSTOM_MAIN)
        manager = TemplateManager(custom_templates_dir=str(tmp_path))
        manager.create_custom_template("doctest", "custom_main", content)

        reloaded = TemplateManager(custom_templates_dir=str(tmp_path))
        assert reloaded.get_template("doctest", "custom_main") == content

    def test_create_invalid_custom_template(self, tmp_path):
        """测试创建无效模板."""
        manager = TemplateManager(custom_templates_dir=str(tmp_path))

        with pytest.raises(TemplateValidationError) as exc_info:
            manager.create_custom_template("googletest", "auto_main", "int main() { return 0; }\n")

        assert exc_info.value.problems
        assert not list(tmp_path.iterdir())

    def test_create_custom_template_without_dir(self):
        """测试未配置目录时创建模板."""
        manager = TemplateManager()

        with pytest.raises(ConfigurationError, match="未配置自定义模板目录"):
            manager.create_custom_template("catch2", "auto_main", CUSTOM_CATCH2_AUTO)


class TestSelectTemplate:
    """模板选择测试."""

    def test_select_auto_main_by_default(self):
        """测试默认选择 auto_main."""
        manager = TemplateManager(default_framework="doctest")
        template = manager.select_template()

        assert template.framework is TestFramework.DOCTEST
        assert template.style is MainStyle.AUTO_MAIN

    def test_select_custom_main(self):
        """测试需要自带 main 时选择 custom_main."""
        manager = TemplateManager(default_framework="doctest")
        template = manager.select_template(requires_custom_main=True, framework="googletest")

        assert template.framework is TestFramework.GOOGLETEST
        assert template.style is MainStyle.CUSTOM_MAIN

    def test_select_unknown_framework(self):
        """测试选择未知框架."""
        with pytest.raises(TemplateNotFoundError):
            TemplateManager().select_template(framework="boost_test")

    def test_invalid_default_framework(self):
        """测试无效的默认框架."""
        with pytest.raises(ValueError):
            TemplateManager(default_framework="boost_test")

    def test_get_default_uses_configured_style(self):
        """测试未指定样式时使用默认样式."""
        manager = TemplateManager(default_framework="googletest", default_style="custom_main")
        template = manager.get_default()

        assert template.framework is TestFramework.GOOGLETEST
        assert template.style is MainStyle.CUSTOM_MAIN
        assert manager.get_default("catch2").key == (TestFramework.CATCH2, MainStyle.CUSTOM_MAIN)
        assert manager.get_default(style="auto_main").key == (
            TestFramework.GOOGLETEST, MainStyle.AUTO_MAIN
        )

    def test_default_style_from_settings(self, monkeypatch):
        """测试默认样式读取配置."""
        monkeypatch.setattr(manager_module.settings, "default_main_style", "custom_main")

        assert TemplateManager().default_style is MainStyle.CUSTOM_MAIN

    def test_invalid_default_style(self):
        """测试无效的默认样式."""
        with pytest.raises(ValueError):
            TemplateManager(default_style="own_main")


class TestModuleLookup:
    """模块级查询测试."""

    def test_get_template(self, monkeypatch):
        """测试模块级 get_template."""
        monkeypatch.setattr(manager_module, "_manager", None)

        assert "Catch::Session" in get_template("catch2", "custom_main")
        assert get_manager() is get_manager()

    def test_get_template_not_found(self, monkeypatch):
        """测试模块级查询未注册组合."""
        monkeypatch.setattr(manager_module, "_manager", None)

        with pytest.raises(TemplateNotFoundError):
            get_template("boost_test", "auto_main")
