"""测试入口模板模块.

提供 C++ 测试框架入口模板的注册与查询，支持：
- 内置 Catch2 / doctest / GoogleTest 模板
- 用户自定义模板
- 新项目 hello-world 入口模板
"""

from .registry import TemplateRegistry, TestMainTemplate, validate_template
from .manager import TemplateManager, get_manager, get_template
from .project_mains import MainFileLanguage, ProjectOutputType, get_main_template, main_file_name

__all__ = [
    'TemplateRegistry',
    'TestMainTemplate',
    'validate_template',
    'TemplateManager',
    'get_manager',
    'get_template',
    'MainFileLanguage',
    'ProjectOutputType',
    'get_main_template',
    'main_file_name',
]
