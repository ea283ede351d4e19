"""新项目入口文件模板."""

from enum import Enum
from typing import Dict, Union

from cpp_test_mains.exceptions import TemplateNotFoundError


class MainFileLanguage(str, Enum):
    """入口文件语言."""

    C = "c"
    CPP = "cpp"


class ProjectOutputType(str, Enum):
    """项目产物类型."""

    EXECUTABLE = "executable"
    LIBRARY = "library"


C_MAIN_CONTENT = """#include <stdio.h>

int main(int argc, const char** argv) {
\tprintf("Hello World!");
\treturn 0;
}
"""

CPP_MAIN_CONTENT = """#include <cstdlib>
#include <iostream>

int main(int argc, const char** argv) {
\tstd::cout << "Hello World" << std::endl;
\treturn EXIT_SUCCESS;
}
"""

_MAIN_TEMPLATES: Dict[MainFileLanguage, str] = {
    MainFileLanguage.C: C_MAIN_CONTENT,
    MainFileLanguage.CPP: CPP_MAIN_CONTENT,
}


def _parse_language(language: Union[str, MainFileLanguage]) -> MainFileLanguage:
    if isinstance(language, MainFileLanguage):
        return language
    normalized = str(language).strip().lower()
    if normalized == "c++":
        normalized = MainFileLanguage.CPP.value
    try:
        return MainFileLanguage(normalized)
    except ValueError:
        raise TemplateNotFoundError(f"No main template for language: {language}")


def get_main_template(language: Union[str, MainFileLanguage]) -> str:
    """获取可执行项目的 hello-world 入口文件内容.

    C++ 版本额外包含 <cstdlib>，使 EXIT_SUCCESS 不依赖 <iostream> 的间接包含。

    Raises:
        TemplateNotFoundError: 未知语言
    """
    return _MAIN_TEMPLATES[_parse_language(language)]


def main_file_name(
    project_name: str,
    language: Union[str, MainFileLanguage],
    output_type: Union[str, ProjectOutputType],
) -> str:
    """入口文件名.

    可执行项目为 main.c / main.cpp，库项目为 <项目名>.h / <项目名>.hpp。
    """
    resolved_language = _parse_language(language)
    resolved_type = (
        output_type if isinstance(output_type, ProjectOutputType)
        else ProjectOutputType(str(output_type).strip().lower())
    )

    if resolved_type is ProjectOutputType.EXECUTABLE:
        stem, extension = "main", "c"
    else:
        if not project_name:
            raise ValueError("库项目需要项目名称")
        stem, extension = project_name, "h"

    if resolved_language is MainFileLanguage.CPP:
        extension += "pp"

    return f"{stem}.{extension}"
