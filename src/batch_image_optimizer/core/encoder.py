"""图像编码模块。

把栅格按质量参数编码为 JPEG 或 PNG 字节。
"""

from dataclasses import dataclass, field
from io import BytesIO

from ..config import get_config
from ..exceptions import EncodeError, handle_image_errors
from ..models.constants import (
    ImageFormats,
    QualityDefaults,
    get_mime_type,
    is_lossless_format,
)
from ..utils.logging_helpers import get_logger
from .decoder import Raster
from .formats import FormatProcessor, get_save_parameters


logger = get_logger()


@dataclass(frozen=True)
class EncodedImage:
    """编码结果"""

    data: bytes = field(repr=False)
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)


def clamp_quality(quality: int) -> int:
    """把质量截断到 1-100，超出范围不报错"""
    return max(
        QualityDefaults.MIN_QUALITY, min(QualityDefaults.MAX_QUALITY, int(quality))
    )


def to_native_quality(quality: int) -> float:
    """线性映射到编码器的 0-1 质量刻度"""
    return clamp_quality(quality) / 100


def resolve_output_format(preferred_format: str | None) -> str:
    """确定输出格式：无损格式保持原样，其余一律使用 JPEG"""
    if preferred_format and is_lossless_format(preferred_format):
        return "PNG"
    return ImageFormats.DEFAULT_LOSSY_FORMAT


class Encoder:
    """图像编码器

    不修改输入栅格，每次编码都分配新的缓冲区。
    """

    def __init__(
        self,
        optimize: bool | None = None,
        progressive: bool | None = None,
        png_compress_level: int | None = None,
        format_processor: FormatProcessor | None = None,
    ):
        defaults = get_config().optimizer
        self.optimize = defaults.JPEG_OPTIMIZE if optimize is None else optimize
        self.progressive = (
            defaults.JPEG_PROGRESSIVE if progressive is None else progressive
        )
        self.png_compress_level = (
            defaults.PNG_COMPRESS_LEVEL
            if png_compress_level is None
            else png_compress_level
        )
        self.format_processor = format_processor or FormatProcessor()

    def encode(
        self,
        raster: Raster,
        quality: int,
        preferred_format: str | None = None,
        name: str = "<raster>",
    ) -> EncodedImage:
        """编码栅格

        Args:
            raster: 解码后的栅格
            quality: 质量 1-100，超出范围会被截断；无损路径下忽略
            preferred_format: 首选格式（MIME 类型或格式名）
            name: 输入名称，仅用于错误信息

        Returns:
            EncodedImage: 编码后的字节与 MIME 类型

        Raises:
            EncodeError: 栅格尺寸为零或编码器没有产生输出
        """
        if raster.width <= 0 or raster.height <= 0:
            raise EncodeError(f"栅格尺寸无效: {raster.width}x{raster.height}", name)

        target_format = resolve_output_format(preferred_format)
        native_quality = to_native_quality(quality)

        try:
            data = self._encode(raster, target_format, native_quality)
        except EncodeError as e:
            raise EncodeError(e.message, name) from e

        if not data:
            raise EncodeError("编码器没有产生输出", name)

        logger.debug(
            f"编码完成 {name}: {target_format} q={native_quality:.2f}, {len(data)} 字节"
        )
        return EncodedImage(data=data, mime_type=get_mime_type(target_format))

    @handle_image_errors(EncodeError, "图像编码")
    def _encode(
        self, raster: Raster, target_format: str, native_quality: float
    ) -> bytes:
        img = self.format_processor.prepare_for_format(raster.image, target_format)
        save_params = get_save_parameters(
            target_format,
            jpeg_quality=round(native_quality * 100),
            optimize=self.optimize,
            progressive=self.progressive,
            png_compress_level=self.png_compress_level,
        )

        buffer = BytesIO()
        img.save(buffer, format=target_format, **save_params)
        return buffer.getvalue()
