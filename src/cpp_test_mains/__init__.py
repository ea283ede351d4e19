"""cpp-test-mains: C++ 测试框架入口模板注册表."""

__version__ = "0.1.0"

from cpp_test_mains.exceptions import CppTestMainsError, TemplateNotFoundError
from cpp_test_mains.models import MainStyle, TestFramework
from cpp_test_mains.templates import TemplateManager, TemplateRegistry, TestMainTemplate, get_template
from cpp_test_mains.writer import write_test_main

__all__ = [
    "__version__",
    "CppTestMainsError",
    "TemplateNotFoundError",
    "MainStyle",
    "TestFramework",
    "TemplateManager",
    "TemplateRegistry",
    "TestMainTemplate",
    "get_template",
    "write_test_main",
]
