"""文件命名工具模块。

提供统一的输出命名策略和归档内名称去重功能。
"""

import itertools
from collections.abc import Iterable
from pathlib import Path

from ..models.constants import get_extension


OUTPUT_SUFFIX = "-optimized"


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def strip_extension(name: str) -> str:
        """去掉最后一个扩展名，没有扩展名时保留完整名称"""
        # 只保留最后一段路径，归档内不出现目录
        base = name.replace("\\", "/").rsplit("/", 1)[-1]
        dot = base.rfind(".")
        if dot > 0:
            base = base[:dot]
        return base or "image"

    @staticmethod
    def generate_output_name(original_name: str, mime_type: str) -> str:
        """生成输出文件名：<basename>-optimized.<ext>

        Args:
            original_name: 原始文件名
            mime_type: 输出 MIME 类型

        Returns:
            str: 生成的文件名
        """
        base_name = FileNamingStrategy.strip_extension(original_name)
        return f"{base_name}{OUTPUT_SUFFIX}.{get_extension(mime_type)}"


class UniqueNameRegistry:
    """按登记顺序为重复名称追加序号，结果是确定性的

    比较时忽略大小写，避免在不区分大小写的文件系统上解压时相互覆盖。
    """

    def __init__(self, taken: Iterable[str] = ()):
        self._taken: set[str] = {name.casefold() for name in taken}

    @classmethod
    def for_directory(cls, directory: str | Path) -> "UniqueNameRegistry":
        """以目录中已存在的文件名作为已占用名称，避免覆盖已有文件"""
        path = Path(directory)
        if not path.is_dir():
            return cls()
        return cls(entry.name for entry in path.iterdir())

    def claim(self, name: str) -> str:
        """登记名称，冲突时返回 stem-1.ext、stem-2.ext ..."""
        if name.casefold() not in self._taken:
            self._taken.add(name.casefold())
            return name

        stem, dot, ext = name.rpartition(".")
        if not dot:
            stem, ext = name, ""

        for counter in itertools.count(1):
            candidate = f"{stem}-{counter}.{ext}" if dot else f"{stem}-{counter}"
            if candidate.casefold() not in self._taken:
                self._taken.add(candidate.casefold())
                return candidate

        # itertools.count 不会耗尽
        return name  # pragma: no cover


def derive_output_name(original_name: str, mime_type: str) -> str:
    """便捷函数：生成单个输出文件名"""
    return FileNamingStrategy.generate_output_name(original_name, mime_type)


def derive_unique_names(items: Iterable[tuple[str, str]]) -> list[str]:
    """为 (原始名称, 输出 MIME) 序列生成互不冲突的输出名称"""
    registry = UniqueNameRegistry()
    return [
        registry.claim(derive_output_name(name, mime_type))
        for name, mime_type in items
    ]
