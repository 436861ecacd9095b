"""图像处理相关常量定义。

输入/输出格式、MIME 类型与扩展名映射集中在这里，避免各模块硬编码重复。
"""

from typing import Final


class ImageFormats:
    """输入与输出格式管理"""

    # 只定义必要的别名映射（用户友好的别名）
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
        "IMAGE/JPG": "IMAGE/JPEG",
    }

    # 可解码的输入类型
    INPUT_MIME_TYPES: Final[dict[str, str]] = {
        "image/jpeg": "JPEG",
        "image/png": "PNG",
        "image/webp": "WEBP",
    }

    # 只有两种输出编码
    OUTPUT_MIME_TYPES: Final[dict[str, str]] = {
        "JPEG": "image/jpeg",
        "PNG": "image/png",
    }

    # 归档内的扩展名（JPEG 统一使用 jpg）
    OUTPUT_EXTENSIONS: Final[dict[str, str]] = {
        "image/jpeg": "jpg",
        "image/png": "png",
    }

    # 文件扩展名到 MIME 的后备映射
    EXTENSION_MIME_TYPES: Final[dict[str, str]] = {
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".webp": "image/webp",
    }

    LOSSLESS_FORMATS: Final[set[str]] = {"PNG"}
    DEFAULT_LOSSY_FORMAT: Final[str] = "JPEG"


class QualityDefaults:
    """质量相关默认值"""

    DEFAULT: Final[int] = 85

    MIN_QUALITY: Final[int] = 1
    MAX_QUALITY: Final[int] = 100


class ValidationLimits:
    """验证相关限制"""

    # 单个输入的大小上限 (字节)
    MAX_FILE_SIZE: Final[int] = 100 * 1024 * 1024  # 100MB

    # 最大批量处理文件数
    MAX_BATCH_FILES: Final[int] = 1000


def normalize_mime_type(mime_type: str) -> str:
    """标准化 MIME 类型（小写、去参数、处理别名）"""
    normalized = mime_type.split(";", 1)[0].strip().upper()
    return ImageFormats.ALIASES.get(normalized, normalized).lower()


def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称，支持格式名或 MIME 类型"""
    format_upper = format_str.strip().upper()
    if "/" in format_upper:
        format_upper = format_upper.split("/", 1)[1]
    return ImageFormats.ALIASES.get(format_upper, format_upper)


def get_mime_type(format_str: str) -> str:
    """获取输出格式的 MIME 类型"""
    standard_format = get_format_alias(format_str)
    return ImageFormats.OUTPUT_MIME_TYPES.get(
        standard_format, f"image/{standard_format.lower()}"
    )


def get_extension(mime_type: str) -> str:
    """获取输出 MIME 类型对应的归档扩展名（不含点）"""
    normalized = normalize_mime_type(mime_type)
    if normalized in ImageFormats.OUTPUT_EXTENSIONS:
        return ImageFormats.OUTPUT_EXTENSIONS[normalized]
    return normalized.rsplit("/", 1)[-1]


def is_supported_input(mime_type: str) -> bool:
    """检查是否为可解码的输入类型"""
    return normalize_mime_type(mime_type) in ImageFormats.INPUT_MIME_TYPES


def is_lossless_format(format_str: str) -> bool:
    """检查是否为无损格式"""
    return get_format_alias(format_str) in ImageFormats.LOSSLESS_FORMATS
