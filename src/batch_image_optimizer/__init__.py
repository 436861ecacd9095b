"""批量图像优化库。

按统一质量参数重新编码一批图像，并可把结果打包为 ZIP 归档。
"""

__version__ = "0.1.0"
__description__ = "批量图像优化库，基于 Pillow"

# 核心功能导出
from .core import Decoder, EncodedImage, Encoder, Raster
from .engine import ArchiveBuilder, BatchOrchestrator, optimize_images
from .exceptions import (
    ArchiveError,
    DecodeError,
    EncodeError,
    OptimizerError,
    ValidationError,
)
from .models import (
    ArchiveEntry,
    BatchJob,
    BatchStatus,
    ImageInput,
    ItemFailure,
    OptimizationResult,
    reduction_percent,
)


__all__ = [
    "ArchiveBuilder",
    "ArchiveEntry",
    "ArchiveError",
    "BatchJob",
    "BatchOrchestrator",
    "BatchStatus",
    "DecodeError",
    "EncodeError",
    "EncodedImage",
    "Encoder",
    "Decoder",
    "ImageInput",
    "ItemFailure",
    "OptimizationResult",
    "OptimizerError",
    "Raster",
    "ValidationError",
    "get_version",
    "optimize_images",
    "reduction_percent",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
