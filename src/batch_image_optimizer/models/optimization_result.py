"""优化结果模型。

定义单个图像优化结果、单项失败以及批次状态的数据结构。
"""

import uuid
from enum import Enum
from typing import Any, TypedDict

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field

from .image_input import ImageInput


def reduction_percent(original_size: int, optimized_size: int) -> str:
    """体积缩减百分比，保留一位小数

    体积增大时返回负值，不做截断；舍入到零的增大保留为 "-0.0"。
    """
    if original_size <= 0:
        return "0.0"
    return f"{(1 - optimized_size / original_size) * 100:.1f}"


class BaseResult(BaseModel):
    """结果基类，包含通用方法"""

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class OptimizationResult(BaseResult):
    """单个图像优化成功的结果"""

    model_config = ConfigDict(frozen=True)

    original_name: str = Field(description="原始文件名")
    original_size: int = Field(description="原始大小（字节）")
    optimized_bytes: bytes = Field(description="优化后的字节", repr=False)
    optimized_size: int = Field(description="优化后大小（字节）")
    output_mime_type: str = Field(description="输出 MIME 类型")
    original_bytes: bytes = Field(b"", description="原始字节，用于预览", repr=False)

    width: int | None = Field(None, description="图像宽度")
    height: int | None = Field(None, description="图像高度")

    success: bool = Field(True, description="是否成功")

    @property
    def reduction_percent(self) -> str:
        """体积缩减百分比字符串，如 "60.0" """
        return reduction_percent(self.original_size, self.optimized_size)

    @property
    def download_name(self) -> str:
        """单独下载时使用的文件名"""
        from ..utils.naming_helpers import derive_output_name

        return derive_output_name(self.original_name, self.output_mime_type)

    def get_size_delta(self) -> int:
        """节省的字节数，体积增大时为负"""
        return self.original_size - self.optimized_size

    def get_original_size_human(self) -> str:
        """人类可读的原始文件大小"""
        return self.format_size(self.original_size)

    def get_optimized_size_human(self) -> str:
        """人类可读的优化后文件大小"""
        return self.format_size(self.optimized_size)

    def get_summary(self) -> str:
        """优化结果摘要"""
        return (
            f"{self.get_original_size_human()} → {self.get_optimized_size_human()} "
            f"(缩减 {self.reduction_percent}%，"
            f"节省 {self.format_size(self.get_size_delta())})"
        )

    def to_record(self) -> "ResultRecord":
        """对外暴露的结果记录（不含字节）"""
        return {
            "original_name": self.original_name,
            "original_size": self.original_size,
            "optimized_size": self.optimized_size,
            "output_mime_type": self.output_mime_type,
            "reduction_percent": self.reduction_percent,
        }


class ItemFailure(BaseModel):
    """单项处理失败的标记"""

    model_config = ConfigDict(frozen=True)

    index: int = Field(description="对应输入的索引")
    name: str = Field(description="输入文件名")
    error_type: str = Field(description="错误类型，如 DecodeError")
    message: str = Field(description="错误信息")

    success: bool = Field(False, description="是否成功")

    def to_record(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "error_type": self.error_type,
            "message": self.message,
        }


class BatchStatus(str, Enum):
    """批次生命周期状态"""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    ARCHIVING = "archiving"
    ARCHIVED = "archived"
    ARCHIVE_FAILED = "archive_failed"


# 允许触发归档的状态
ARCHIVABLE_STATUSES = frozenset(
    {BatchStatus.COMPLETED, BatchStatus.ARCHIVED, BatchStatus.ARCHIVE_FAILED}
)


class BatchJob(BaseResult):
    """一次优化请求的批次状态

    results[i] 始终对应 inputs[i]，为成功结果或失败标记。
    """

    job_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    generation: int = Field(0, description="所属调度代次")
    inputs: list[ImageInput] = Field(default_factory=list)
    quality: int = Field(description="已截断到 1-100 的质量值")
    results: list[OptimizationResult | ItemFailure] = Field(default_factory=list)
    status: BatchStatus = Field(BatchStatus.IDLE)
    error: str | None = Field(None, description="批次级错误信息")
    archive_error: str | None = Field(None, description="最近一次归档错误")

    @property
    def successes(self) -> list[OptimizationResult]:
        return [r for r in self.results if isinstance(r, OptimizationResult)]

    @property
    def failures(self) -> list[ItemFailure]:
        return [r for r in self.results if isinstance(r, ItemFailure)]

    def get_total_count(self) -> int:
        return len(self.inputs)

    def get_success_count(self) -> int:
        return len(self.successes)

    def get_failure_count(self) -> int:
        return len(self.failures)

    def is_fully_successful(self) -> bool:
        """只有全部成功时才视为完全成功"""
        return (
            self.status in ARCHIVABLE_STATUSES
            and self.get_failure_count() == 0
            and self.get_success_count() == self.get_total_count()
        )

    def get_total_original_size(self) -> int:
        """成功项的原始大小总和"""
        return sum(r.original_size for r in self.successes)

    def get_total_optimized_size(self) -> int:
        """成功项的优化后大小总和"""
        return sum(r.optimized_size for r in self.successes)

    def get_overall_reduction_percent(self) -> str:
        return reduction_percent(
            self.get_total_original_size(), self.get_total_optimized_size()
        )

    def get_summary(self) -> str:
        """批量处理摘要"""
        if self.status == BatchStatus.FAILED:
            return f"批量处理失败: {self.error}"

        total = self.get_total_count()
        successful = self.get_success_count()
        return (
            f"处理 {successful}/{total} 个文件，"
            f"{self.format_size(self.get_total_original_size())} → "
            f"{self.format_size(self.get_total_optimized_size())} "
            f"(缩减 {self.get_overall_reduction_percent()}%)"
        )


# ============================================================================
# 类型定义 - 统一的输出记录类型
# ============================================================================


class ResultRecord(TypedDict):
    """对调用方暴露的单项结果记录"""

    original_name: str
    original_size: int
    optimized_size: int
    output_mime_type: str
    reduction_percent: str
