"""消息格式化工具模块。

提供统一的错误消息、状态消息格式化功能。
"""

from pathlib import Path
from typing import Any


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def unsupported_type(name: str, mime_type: str) -> str:
        """不支持的输入类型消息"""
        return f"不支持的图像类型 {mime_type!r}: {name}"

    @staticmethod
    def empty_input(name: str) -> str:
        """空输入消息"""
        return f"输入为空（0 字节）: {name}"

    @staticmethod
    def invalid_transition(job_id: str, status: str, operation: str) -> str:
        """批次状态不允许该操作的消息"""
        return f"批次 {job_id} 处于 {status} 状态，无法{operation}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

