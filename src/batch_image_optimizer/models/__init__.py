"""数据模型包。

定义批量图像优化相关的数据结构和模型。
"""

from .constants import (
    ImageFormats,
    QualityDefaults,
    ValidationLimits,
    get_extension,
    get_format_alias,
    get_mime_type,
    is_lossless_format,
    is_supported_input,
    normalize_mime_type,
)
from .image_input import ArchiveEntry, ImageInput
from .optimization_result import (
    ARCHIVABLE_STATUSES,
    BatchJob,
    BatchStatus,
    ItemFailure,
    OptimizationResult,
    ResultRecord,
    reduction_percent,
)


__all__ = [
    "ARCHIVABLE_STATUSES",
    "ArchiveEntry",
    "BatchJob",
    "BatchStatus",
    # 常量和工具
    "ImageFormats",
    "ImageInput",
    "ItemFailure",
    "OptimizationResult",
    "QualityDefaults",
    "ResultRecord",
    "ValidationLimits",
    "get_extension",
    "get_format_alias",
    "get_mime_type",
    "is_lossless_format",
    "is_supported_input",
    "normalize_mime_type",
    "reduction_percent",
]
