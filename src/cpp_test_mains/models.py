"""测试框架与入口样式数据模型."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple, Union


class TestFramework(str, Enum):
    """C++ 测试框架."""

    __test__ = False

    CATCH2 = "catch2"
    DOCTEST = "doctest"
    GOOGLETEST = "googletest"

    @classmethod
    def parse(cls, value: Union[str, "TestFramework"]) -> "TestFramework":
        """解析框架名称 (忽略大小写与首尾空白).

        Raises:
            ValueError: 未知框架
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class MainStyle(str, Enum):
    """测试入口样式."""

    AUTO_MAIN = "auto_main"
    CUSTOM_MAIN = "custom_main"

    @classmethod
    def parse(cls, value: Union[str, "MainStyle"]) -> "MainStyle":
        """解析入口样式名称 (忽略大小写与首尾空白).

        Raises:
            ValueError: 未知样式
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())

    @classmethod
    def from_requires_custom_main(cls, requires_custom_main: bool) -> "MainStyle":
        """根据测试是否需要自带 main 选择样式."""
        return cls.CUSTOM_MAIN if requires_custom_main else cls.AUTO_MAIN

    @property
    def defines_main(self) -> bool:
        return self is MainStyle.CUSTOM_MAIN


TemplateKey = Tuple[TestFramework, MainStyle]


@dataclass(frozen=True)
class FrameworkProfile:
    """测试框架描述.

    markers 为该框架所有模板都必须包含的符号，
    style_markers 为特定入口样式额外要求的符号。
    """

    framework: TestFramework
    display_name: str
    header: str
    markers: List[str] = field(default_factory=list)
    style_markers: Dict[MainStyle, List[str]] = field(default_factory=dict)

    def required_markers(self, style: MainStyle) -> List[str]:
        return list(self.markers) + list(self.style_markers.get(style, []))


FRAMEWORK_PROFILES: Dict[TestFramework, FrameworkProfile] = {
    TestFramework.CATCH2: FrameworkProfile(
        framework=TestFramework.CATCH2,
        display_name="Catch2",
        header="catch2/catch_test_macros.hpp",
        markers=["TEST_CASE"],
        style_markers={
            MainStyle.CUSTOM_MAIN: ["Catch::Session"],
        },
    ),
    TestFramework.DOCTEST: FrameworkProfile(
        framework=TestFramework.DOCTEST,
        display_name="doctest",
        header="doctest/doctest.h",
        markers=["TEST_CASE", "DOCTEST_CONFIG_IMPLEMENT"],
        style_markers={
            MainStyle.AUTO_MAIN: ["DOCTEST_CONFIG_IMPLEMENT_WITH_MAIN"],
            MainStyle.CUSTOM_MAIN: ["doctest::Context"],
        },
    ),
    TestFramework.GOOGLETEST: FrameworkProfile(
        framework=TestFramework.GOOGLETEST,
        display_name="GoogleTest",
        header="gtest/gtest.h",
        markers=["TEST("],
        style_markers={
            MainStyle.CUSTOM_MAIN: ["RUN_ALL_TESTS()", "testing::InitGoogleTest"],
        },
    ),
}


def get_profile(framework: Union[str, TestFramework]) -> FrameworkProfile:
    """获取框架描述.

    Raises:
        ValueError: 未知框架
    """
    return FRAMEWORK_PROFILES[TestFramework.parse(framework)]
