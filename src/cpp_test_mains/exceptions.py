"""cpp-test-mains 专用异常类.

提供细粒度的异常处理，便于错误诊断和恢复。
"""

from typing import List, Optional


class CppTestMainsError(Exception):
    """cpp-test-mains 基础异常类."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CppTestMainsError):
    """配置错误."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, details)


class TemplateError(CppTestMainsError):
    """模板错误基类."""

    def __init__(self, message: str, template_name: Optional[str] = None):
        details = {"template_name": template_name} if template_name else {}
        super().__init__(message, details)


class TemplateNotFoundError(TemplateError):
    """模板未找到错误."""

    def __init__(
        self,
        message: str,
        framework: Optional[str] = None,
        style: Optional[str] = None,
    ):
        template_name = f"{framework}/{style}" if framework and style else None
        super().__init__(message, template_name)
        if framework:
            self.details["framework"] = framework
        if style:
            self.details["style"] = style


class DuplicateTemplateError(TemplateError):
    """模板重复注册错误."""

    pass


class TemplateRenderError(TemplateError):
    """模板渲染错误."""

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, template_name)
        if context:
            self.details["context_keys"] = list(context.keys())


class TemplateValidationError(TemplateError):
    """模板校验错误."""

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        problems: Optional[List[str]] = None,
    ):
        super().__init__(message, template_name)
        self.problems = problems or []
        if self.problems:
            self.details["problems"] = self.problems


class TemplateWriteError(TemplateError):
    """模板写入错误."""

    def __init__(
        self,
        message: str,
        template_name: Optional[str] = None,
        path: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message, template_name)
        if path:
            self.details["path"] = path
        if reason:
            self.details["reason"] = reason
