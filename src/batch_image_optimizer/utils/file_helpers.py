"""工具函数模块。

提供从文件系统读取输入、写出结果的实用工具函数。
"""

from io import BytesIO
from pathlib import Path

from PIL import Image

from ..models.constants import ImageFormats, get_mime_type
from ..models.image_input import ImageInput
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def get_image_mime_type(data: bytes, fallback_name: str | None = None) -> str | None:
    """获取图片数据的 MIME 类型

    优先根据内容识别，失败时按文件扩展名推断。

    Args:
        data: 图片字节
        fallback_name: 用于推断的文件名（可选）

    Returns:
        str | None: MIME 类型，如 'image/jpeg'，无法判断时返回 None
    """
    try:
        with Image.open(BytesIO(data)) as img:
            if img.format:
                return Image.MIME.get(img.format) or get_mime_type(img.format)
    except Exception as e:
        logger.debug(
            MessageFormatter.operation_failed(
                "识别 MIME 类型", fallback_name or "<bytes>", e
            )
        )

    if fallback_name:
        suffix = Path(fallback_name).suffix.lower()
        return ImageFormats.EXTENSION_MIME_TYPES.get(suffix)
    return None


def load_image_input(file_path: str | Path) -> ImageInput:
    """读取文件并构建 ImageInput

    Args:
        file_path: 图片文件路径

    Returns:
        ImageInput: 输入图像

    Raises:
        FileNotFoundError: 文件不存在
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(MessageFormatter.file_not_found(path))

    data = path.read_bytes()
    mime_type = get_image_mime_type(data, path.name) or "application/octet-stream"
    return ImageInput(name=path.name, data=data, mime_type=mime_type, size=len(data))


def write_bytes(output_path: str | Path, data: bytes) -> Path:
    """写出字节，必要时创建父目录"""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.debug(f"已写出 {len(data)} 字节: {path}")
    return path
