"""测试配置文件。

提供测试所需的fixtures和配置，测试图像全部在内存中生成。
"""

from collections.abc import Callable
from io import BytesIO

import pytest
from PIL import Image, ImageDraw

from batch_image_optimizer.models.image_input import ImageInput


def render_image(
    fmt: str = "PNG",
    size: tuple[int, int] = (200, 150),
    mode: str = "RGB",
    **save_kwargs,
) -> bytes:
    """生成带色块的测试图像并编码为字节"""
    background = (255, 255, 255, 0) if mode == "RGBA" else "white"
    img = Image.new(mode, size, color=background)
    draw = ImageDraw.Draw(img)
    width, height = size
    for i in range(30):
        x, y = (i * 17) % width, (i * 13) % height
        color = (i * 5 % 256, i * 7 % 256, i * 11 % 256)
        if mode == "RGBA":
            color = (*color, 100 + (i * 15) % 155)
        draw.rectangle([x, y, x + 25, y + 20], fill=color)

    buffer = BytesIO()
    img.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def make_input() -> Callable[..., ImageInput]:
    """按名称和格式生成 ImageInput 的工厂"""

    mime_types = {"PNG": "image/png", "JPEG": "image/jpeg", "WEBP": "image/webp"}

    def _make(name: str, fmt: str = "PNG", **kwargs) -> ImageInput:
        data = render_image(fmt, **kwargs)
        return ImageInput(name=name, data=data, mime_type=mime_types[fmt])

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    return render_image("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return render_image("JPEG", quality=95)


@pytest.fixture
def webp_bytes() -> bytes:
    return render_image("WEBP", quality=90)


@pytest.fixture
def transparent_png_bytes() -> bytes:
    return render_image("PNG", mode="RGBA")


@pytest.fixture
def corrupt_input() -> ImageInput:
    """声明为 PNG 但内容不是图像"""
    return ImageInput(
        name="broken.png", data=b"\x89PNG\r\n\x1a\nnot really", mime_type="image/png"
    )


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """每个测试使用不受环境变量影响的全局配置"""
    from batch_image_optimizer import config

    for var in (
        "BIO_DEFAULT_QUALITY",
        "BIO_MAX_WORKERS",
        "BIO_JPEG_PROGRESSIVE",
        "BIO_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    config.reset_config()
    yield
    config.reset_config()
