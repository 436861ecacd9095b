"""输入图像模型。

定义批量优化请求中单个图像的数据结构。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ImageInput(BaseModel):
    """单个输入图像，创建后不可变"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="原始文件名")
    data: bytes = Field(description="原始图像字节", repr=False)
    mime_type: str = Field(description="声明的 MIME 类型")
    size: int = Field(-1, description="原始大小（字节），缺省为数据长度")

    @model_validator(mode="before")
    @classmethod
    def default_size(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("size") in (None, -1):
            values = {**values, "size": len(values.get("data") or b"")}
        return values

    @classmethod
    def from_path(cls, path) -> "ImageInput":
        """从文件读取输入，MIME 类型按内容识别"""
        from ..utils.file_helpers import load_image_input

        return load_image_input(path)


class ArchiveEntry(BaseModel):
    """归档条目：原始名称与编码后的字节"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="原始文件名（含扩展名）")
    data: bytes = Field(description="编码后的字节", repr=False)
    mime_type: str = Field(description="输出 MIME 类型")
