"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

# 从文件助手模块导入
from .file_helpers import (
    get_image_mime_type,
    load_image_input,
    write_bytes,
)

# 从日志工具模块导入
from .logging_helpers import configure_logging, get_logger

# 从消息格式化模块导入
from .message_formatter import MessageFormatter

# 从命名助手模块导入
from .naming_helpers import (
    FileNamingStrategy,
    UniqueNameRegistry,
    derive_output_name,
    derive_unique_names,
)


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "UniqueNameRegistry",
    "configure_logging",
    "derive_output_name",
    "derive_unique_names",
    "get_image_mime_type",
    "get_logger",
    "load_image_input",
    "write_bytes",
]
