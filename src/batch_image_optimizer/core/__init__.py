"""核心模块包。

图像解码、格式准备与编码。
"""

from .decoder import Decoder, Raster
from .encoder import (
    EncodedImage,
    Encoder,
    clamp_quality,
    resolve_output_format,
    to_native_quality,
)
from .formats import FormatProcessor


__all__ = [
    "Decoder",
    "EncodedImage",
    "Encoder",
    "FormatProcessor",
    "Raster",
    "clamp_quality",
    "resolve_output_format",
    "to_native_quality",
]
