#!/usr/bin/env python3
"""批量图像优化演示脚本。

展示 batch_image_optimizer 库的核心功能：
- 生成几张测试图像（含一张损坏的输入）
- 按统一质量批量优化，查看每项的缩减比例
- 把成功的结果打包为 ZIP
"""

from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw

from batch_image_optimizer import BatchOrchestrator, ImageInput, OptimizationResult


def get_output_dir() -> Path:
    """获取输出目录 - 使用项目的 tmp 目录"""
    output_dir = Path(__file__).parent.parent / "tmp" / "examples"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def make_input(name: str, fmt: str, mime_type: str) -> ImageInput:
    """生成一张带渐变和色块的测试图像"""
    img = Image.new("RGB", (640, 480), color="white")
    draw = ImageDraw.Draw(img)
    for i in range(40):
        x, y = (i * 16) % 640, (i * 12) % 480
        draw.rectangle([x, y, x + 60, y + 45], fill=(i * 6 % 256, i * 9 % 256, 200))
    buffer = BytesIO()
    img.save(buffer, format=fmt, quality=100)
    return ImageInput(name=name, data=buffer.getvalue(), mime_type=mime_type)


def main() -> None:
    inputs = [
        make_input("photo.jpg", "JPEG", "image/jpeg"),
        ImageInput(name="broken.png", data=b"not an image", mime_type="image/png"),
        make_input("diagram.png", "PNG", "image/png"),
    ]

    orchestrator = BatchOrchestrator()
    job = orchestrator.run(inputs, quality=70)

    print(f"📦 {job.get_summary()}")
    for result in job.results:
        if isinstance(result, OptimizationResult):
            print(f"  ✅ {result.original_name}: {result.get_summary()}")
        else:
            print(f"  ❌ {result.name}: {result.error_type} - {result.message}")

    archive_path = get_output_dir() / "optimized-images.zip"
    archive_path.write_bytes(orchestrator.archive(job))
    print(f"🗜️ 归档已写出: {archive_path}")


if __name__ == "__main__":
    main()
