"""图像优化处理引擎模块。

包含批量调度、并发执行和归档构建等核心处理逻辑。
"""

from .archive import ArchiveBuilder, build_entries
from .batch import BatchOrchestrator, optimize_images
from .concurrent_executor import ConcurrentExecutor


__all__ = [
    "ArchiveBuilder",
    "BatchOrchestrator",
    "ConcurrentExecutor",
    "build_entries",
    "optimize_images",
]
