"""格式处理器模块。

为两种输出编码准备图像的色彩模式，并给出对应的保存参数。
"""

import logging
from typing import Any

from PIL import Image

from ..models.constants import ImageFormats


logger = logging.getLogger(__name__)

# JPEG 不支持透明度时使用的合成背景色
DEFAULT_BACKGROUND: tuple[int, int, int] = (255, 255, 255)


class FormatProcessor:
    """格式处理器

    所有方法都返回新的图像对象或原对象本身，不修改输入图像。
    """

    def __init__(self, background: tuple[int, int, int] = DEFAULT_BACKGROUND):
        self.background = background

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式（JPEG / PNG）

        Returns:
            Image.Image: 处理后的图片对象
        """
        match target_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case _:
                logger.warning(
                    f"不支持的输出格式: {target_format}, "
                    f"按 {ImageFormats.DEFAULT_LOSSY_FORMAT} 处理"
                )
                return self._prepare_for_jpeg(img)

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG不支持透明度，把alpha通道合成到背景色上"""
        if img.mode == "P":
            if "transparency" not in img.info:
                return img.convert("RGB")
            img = img.convert("RGBA")

        if img.mode in ("RGBA", "LA", "PA"):
            rgba = img.convert("RGBA")
            rgb_img = Image.new("RGB", rgba.size, self.background)
            rgb_img.paste(rgba, mask=rgba.getchannel("A"))
            return rgb_img

        if img.mode != "RGB":
            # CMYK、灰度、二值等模式统一转换为RGB
            return img.convert("RGB")

        return img

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG支持多种色彩模式，只处理PNG无法直接写出的模式"""
        if img.mode == "P":
            # 调色板保持原样，PNG直接支持
            return img

        if img.mode == "CMYK":
            return img.convert("RGB")

        if img.mode in ("1", "L", "LA", "RGB", "RGBA", "I", "I;16"):
            return img

        return img.convert("RGBA" if "A" in img.getbands() else "RGB")


def get_save_parameters(
    format_name: str,
    jpeg_quality: int,
    optimize: bool = True,
    progressive: bool = False,
    png_compress_level: int = 9,
) -> dict[str, Any]:
    """获取保存参数

    PNG 为无损路径，质量参数不参与。

    Returns:
        dict: 传给 Image.save 的参数（不含 format）
    """
    match format_name:
        case "PNG":
            return {
                "optimize": optimize,
                "compress_level": png_compress_level,
            }
        case _:
            return get_jpeg_params(jpeg_quality, optimize, progressive)


def get_jpeg_params(
    quality: int, optimize: bool = True, progressive: bool = False
) -> dict[str, Any]:
    """获取JPEG压缩参数

    - optimize: 额外处理以找到最优编码设置
    - progressive: 渐进式JPEG，适合网络传输
    - subsampling: 色度子采样，高质量时使用 4:2:2，其余 4:2:0
    """
    params: dict[str, Any] = {
        "quality": quality,
        "optimize": optimize,
        "progressive": progressive,
    }

    if quality >= 85:
        params["subsampling"] = 1  # "4:2:2"
    else:
        params["subsampling"] = 2  # "4:2:0"

    return params
