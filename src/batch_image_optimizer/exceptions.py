"""图像优化异常处理模块。

定义统一的异常类和错误处理机制，包含异常映射装饰器。
"""

from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.optimization_result import ItemFailure
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class OptimizerError(Exception):
    """优化相关错误基类"""

    def __init__(self, message: str, item_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.item_name = item_name

    def __str__(self) -> str:
        if self.item_name:
            return f"{self.message} [{self.item_name}]"
        return self.message


class ValidationError(OptimizerError):
    """参数验证错误"""

    pass


class DecodeError(OptimizerError):
    """解码错误：字节损坏、截断或类型不受支持"""

    pass


class EncodeError(OptimizerError):
    """编码错误：编码器没有产生输出"""

    pass


class ArchiveError(OptimizerError):
    """归档错误：没有条目或某个条目压缩失败"""

    def __init__(self, message: str, entry_name: str | None = None):
        super().__init__(message, entry_name)
        self.entry_name = entry_name


def handle_image_errors(
    error_cls: type[OptimizerError], operation_name: str = "图像处理"
):
    """统一的图像处理异常映射装饰器

    Pillow 及系统异常被转换为 error_cls，已属于本模块的异常原样抛出。

    Args:
        error_cls: 目标异常类型（DecodeError / EncodeError）
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except OptimizerError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_cls(f"无法识别的图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise error_cls(f"图像尺寸过大，可能存在安全风险: {e}") from e
            except (OSError, SyntaxError) as e:
                # Pillow 对截断或损坏的数据抛出 OSError / SyntaxError
                logger.debug(f"{operation_name} - 数据损坏: {e}")
                raise error_cls(f"图像数据损坏或被截断: {e}") from e
            except (ValueError, TypeError, SystemError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise error_cls(f"{operation_name}失败: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    把单项异常转换为带标签的 ItemFailure，并记录日志。
    """

    @staticmethod
    def _log_error(
        operation: str, name: str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图像解码"、"图像编码"等）
            name: 相关输入名称
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, name, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def to_failure(
        error: Exception,
        index: int,
        name: str,
        fallback_cls: type[OptimizerError] = DecodeError,
    ) -> ItemFailure:
        """把单项异常转换为失败标记

        未归类的异常按 fallback_cls 标注，保证失败总是带有类型。
        """
        match error:
            case DecodeError() | EncodeError():
                error_type = type(error).__name__
                message = error.message
                level = "warning"
            case OptimizerError():
                error_type = fallback_cls.__name__
                message = error.message
                level = "warning"
            case _:
                error_type = fallback_cls.__name__
                message = f"{type(error).__name__}: {error}"
                level = "error"

        ErrorHandler._log_error(f"处理第 {index} 项", name, error, level)
        return ItemFailure(
            index=index, name=name, error_type=error_type, message=message
        )
