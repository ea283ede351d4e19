"""配置管理模块."""

import logging
import os
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cpp_test_mains.models import MainStyle, TestFramework


class Settings(BaseSettings):
    """应用配置."""

    model_config = SettingsConfigDict(
        env_prefix="CPP_TEST_MAINS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_test_framework: str = TestFramework.CATCH2.value
    default_main_style: str = MainStyle.AUTO_MAIN.value

    # 自定义模板目录 (*.yaml)
    custom_templates_dir: Optional[str] = None

    test_main_file_name: str = "main.cpp"

    # 日志配置
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @field_validator("default_test_framework")
    @classmethod
    def validate_test_framework(cls, v: str) -> str:
        """验证默认测试框架."""
        try:
            return TestFramework.parse(v).value
        except ValueError:
            allowed = ", ".join(f.value for f in TestFramework)
            raise ValueError(f"未知的测试框架: {v} (可选: {allowed})")

    @field_validator("default_main_style")
    @classmethod
    def validate_main_style(cls, v: str) -> str:
        """验证默认入口样式."""
        try:
            return MainStyle.parse(v).value
        except ValueError:
            allowed = ", ".join(s.value for s in MainStyle)
            raise ValueError(f"未知的入口样式: {v} (可选: {allowed})")

    @field_validator("custom_templates_dir", "log_file")
    @classmethod
    def validate_optional_path(cls, v: Optional[str]) -> Optional[str]:
        """空字符串视为未配置."""
        if v is None or v.strip() == "":
            return None
        return v

    @field_validator("test_main_file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """验证测试入口文件名."""
        if not v or v in (".", ".."):
            raise ValueError("测试入口文件名不能为空")
        if "/" in v or "\\" in v or os.sep in v:
            raise ValueError(f"测试入口文件名不能包含路径分隔符: {v}")
        if not v.endswith((".cpp", ".cc", ".cxx")):
            raise ValueError(f"测试入口文件必须是 C++ 源文件: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"无效的日志级别: {v}")
        return level

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


settings = Settings()
