"""归档构建模块。

把多个命名的字节缓冲打包为一个 ZIP 文件，名称冲突按确定性规则消解。
"""

import importlib
import zipfile
from collections.abc import Iterable, Sequence
from io import BytesIO
from pathlib import Path

from ..config import get_config
from ..exceptions import ArchiveError
from ..models.image_input import ArchiveEntry
from ..models.optimization_result import OptimizationResult
from ..utils.file_helpers import write_bytes
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import derive_unique_names


logger = get_logger()

# 压缩方法依赖的编解码模块
COMPRESSION_MODULES: dict[int, str | None] = {
    zipfile.ZIP_STORED: None,
    zipfile.ZIP_DEFLATED: "zlib",
    zipfile.ZIP_BZIP2: "bz2",
    zipfile.ZIP_LZMA: "lzma",
}


def build_entries(results: Iterable[OptimizationResult]) -> list[ArchiveEntry]:
    """把成功的优化结果转换为归档条目"""
    return [
        ArchiveEntry(
            name=result.original_name,
            data=result.optimized_bytes,
            mime_type=result.output_mime_type,
        )
        for result in results
    ]


class ArchiveBuilder:
    """ZIP 归档构建器

    压缩能力在构造时检查，不可用时立即抛出 ArchiveError。
    """

    def __init__(
        self,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: int | None = None,
    ):
        """初始化归档构建器

        Args:
            compression: zipfile 压缩方法常量
            compresslevel: 压缩级别，None 使用配置默认值（仅 DEFLATED/BZIP2 有效）
        """
        if compression not in COMPRESSION_MODULES:
            raise ArchiveError(f"未知的压缩方法: {compression}")

        module_name = COMPRESSION_MODULES[compression]
        if module_name is not None:
            try:
                importlib.import_module(module_name)
            except ImportError as e:
                raise ArchiveError(f"压缩方法不可用，缺少模块 {module_name}: {e}") from e

        if compresslevel is None and compression in (
            zipfile.ZIP_DEFLATED,
            zipfile.ZIP_BZIP2,
        ):
            compresslevel = get_config().optimizer.ARCHIVE_COMPRESS_LEVEL

        self.compression = compression
        self.compresslevel = compresslevel

    @staticmethod
    def plan_names(entries: Sequence[ArchiveEntry]) -> list[str]:
        """计算各条目在归档内的名称，顺序与 entries 一致"""
        return derive_unique_names((entry.name, entry.mime_type) for entry in entries)

    def build(self, entries: Iterable[ArchiveEntry]) -> bytes:
        """构建归档

        Args:
            entries: 归档条目

        Returns:
            bytes: ZIP 文件内容

        Raises:
            ArchiveError: 没有条目，或某个条目压缩失败
        """
        entries = list(entries)
        if not entries:
            raise ArchiveError("没有可归档的条目")

        names = self.plan_names(entries)
        buffer = BytesIO()

        with zipfile.ZipFile(
            buffer, "w", compression=self.compression, compresslevel=self.compresslevel
        ) as zf:
            for entry, arcname in zip(entries, names, strict=True):
                try:
                    zf.writestr(arcname, entry.data)
                except Exception as e:
                    logger.error(
                        MessageFormatter.format_error("压缩条目", entry.name, e)
                    )
                    raise ArchiveError(
                        f"压缩条目 {arcname} 失败: {e}", entry.name
                    ) from e

        data = buffer.getvalue()
        logger.info(f"归档完成: {len(entries)} 个条目，{len(data)} 字节")
        return data

    def build_to_path(
        self, entries: Iterable[ArchiveEntry], output_path: str | Path
    ) -> Path:
        """构建归档并写入文件"""
        return write_bytes(output_path, self.build(entries))
