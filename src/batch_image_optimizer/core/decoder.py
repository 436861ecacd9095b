"""图像解码模块。

把原始图像字节解码为内存中的栅格。
"""

from dataclasses import dataclass, field
from io import BytesIO

from PIL import Image, ImageOps

from ..exceptions import DecodeError, handle_image_errors
from ..models.constants import ImageFormats, ValidationLimits, normalize_mime_type
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


@dataclass(frozen=True)
class Raster:
    """解码后的像素网格

    只由消费它的那一次编码调用持有，不在并发任务间共享。
    """

    image: Image.Image = field(repr=False)
    source_mime_type: str = ""

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def mode(self) -> str:
        return self.image.mode


class Decoder:
    """图像解码器

    只接受 JPEG / PNG / WebP 输入。
    """

    def __init__(self, strict_type: bool = False):
        """初始化解码器

        Args:
            strict_type: 为 True 时，实际格式与声明的 MIME 类型不一致即视为解码失败
        """
        self.strict_type = strict_type
        self.allowed_formats = list(ImageFormats.INPUT_MIME_TYPES.values())

    def decode(self, data: bytes, mime_type: str, name: str = "<bytes>") -> Raster:
        """解码图像字节

        Args:
            data: 原始字节
            mime_type: 声明的 MIME 类型
            name: 输入名称，仅用于错误信息

        Returns:
            Raster: 解码后的栅格

        Raises:
            DecodeError: 空输入、类型不受支持、数据损坏或被截断
        """
        # 空输入直接拒绝，不进入 Pillow
        if not data:
            raise DecodeError(MessageFormatter.empty_input(name), name)

        if len(data) > ValidationLimits.MAX_FILE_SIZE:
            raise DecodeError(
                MessageFormatter.validation_error(
                    "data", len(data), f"不能超过 {ValidationLimits.MAX_FILE_SIZE} 字节"
                ),
                name,
            )

        normalized = normalize_mime_type(mime_type)
        if normalized not in ImageFormats.INPUT_MIME_TYPES:
            raise DecodeError(MessageFormatter.unsupported_type(name, mime_type), name)

        try:
            image = self._decode(data, ImageFormats.INPUT_MIME_TYPES[normalized])
        except DecodeError as e:
            raise DecodeError(e.message, name) from e

        return Raster(image=image, source_mime_type=normalized)

    @handle_image_errors(DecodeError, "图像解码")
    def _decode(self, data: bytes, expected_format: str) -> Image.Image:
        with Image.open(BytesIO(data), formats=self.allowed_formats) as img:
            if img.format != expected_format:
                if self.strict_type:
                    raise DecodeError(
                        f"实际格式 {img.format} 与声明的 {expected_format} 不一致"
                    )
                logger.debug(f"实际格式 {img.format} 与声明的 {expected_format} 不一致")

            # 完整读取像素，截断的数据在这里暴露
            img.load()

            # 处理EXIF旋转，返回与文件句柄无关的新图像
            return ImageOps.exif_transpose(img)
