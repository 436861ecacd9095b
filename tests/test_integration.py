"""集成测试。

测试文件读写、端到端流程和 MCP 服务器。
"""

import asyncio
import zipfile
from pathlib import Path

import pytest

from batch_image_optimizer import BatchOrchestrator, BatchStatus, ImageInput
from batch_image_optimizer.utils.file_helpers import (
    get_image_mime_type,
    load_image_input,
    write_bytes,
)


@pytest.fixture
def image_dir(tmp_path: Path, png_bytes, jpeg_bytes) -> Path:
    """写入一组测试文件：两张同名不同格式的图片和一张损坏的图片"""
    (tmp_path / "a.png").write_bytes(png_bytes)
    (tmp_path / "a.jpg").write_bytes(jpeg_bytes)
    (tmp_path / "broken.webp").write_bytes(b"RIFF....WEBPgarbage")
    return tmp_path


class TestFileHelpers:
    """文件工具测试"""

    def test_mime_type_sniffed_from_content(self, png_bytes, jpeg_bytes):
        assert get_image_mime_type(png_bytes, "wrong.jpg") == "image/png"
        assert get_image_mime_type(jpeg_bytes) == "image/jpeg"

    def test_mime_type_falls_back_to_extension(self):
        assert get_image_mime_type(b"garbage", "photo.webp") == "image/webp"
        assert get_image_mime_type(b"garbage") is None

    def test_load_image_input(self, image_dir: Path):
        item = load_image_input(image_dir / "a.jpg")

        assert item.name == "a.jpg"
        assert item.mime_type == "image/jpeg"
        assert item.size == (image_dir / "a.jpg").stat().st_size

    def test_image_input_from_path(self, image_dir: Path):
        item = ImageInput.from_path(image_dir / "a.png")
        assert item.mime_type == "image/png"

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_image_input(tmp_path / "missing.png")

    def test_write_bytes_creates_parents(self, tmp_path: Path):
        target = write_bytes(tmp_path / "x" / "y.bin", b"abc")
        assert target.read_bytes() == b"abc"


class TestEndToEnd:
    """端到端核心测试"""

    def test_complete_workflow(self, image_dir: Path):
        """读取文件 → 批量优化 → 归档"""
        paths = [image_dir / "a.png", image_dir / "broken.webp", image_dir / "a.jpg"]
        inputs = [load_image_input(p) for p in paths]
        orchestrator = BatchOrchestrator()

        job = orchestrator.run(inputs, 75)

        assert job.status == BatchStatus.COMPLETED
        assert [r.success for r in job.results] == [True, False, True]
        assert job.results[1].name == "broken.webp"
        assert job.results[1].error_type == "DecodeError"

        archive_path = image_dir / "optimized-images.zip"
        archive_path.write_bytes(orchestrator.archive(job))

        with zipfile.ZipFile(archive_path) as zf:
            assert zf.namelist() == ["a-optimized.png", "a-optimized.jpg"]
            assert zf.read("a-optimized.jpg") == job.results[2].optimized_bytes


def _call(tool, *args, **kwargs):
    """调用 MCP 工具背后的函数"""
    return getattr(tool, "fn", tool)(*args, **kwargs)


class TestMCPServer:
    """MCP服务器功能测试"""

    def test_mcp_server_imports(self):
        """测试MCP服务器模块导入"""
        from batch_image_optimizer.mcp_server import mcp

        assert mcp is not None

    def test_mcp_core_tools(self):
        """测试 MCP 工具注册"""
        from batch_image_optimizer.mcp_server import mcp

        tools = asyncio.run(mcp.get_tools())

        assert {"optimize_images", "optimize_to_archive"} <= set(tools)

    def test_load_inputs_records_missing_files(self, image_dir: Path):
        """读取失败的路径单独记录，不影响其他文件"""
        from batch_image_optimizer.mcp_server import _load_inputs

        inputs, loaded, errors = _load_inputs(
            [str(image_dir / "a.png"), str(image_dir / "missing.png")]
        )

        assert [i.name for i in inputs] == ["a.png"]
        assert loaded == [image_dir / "a.png"]
        assert errors[0]["name"] == "missing.png"

    def test_batch_response_marks_partial_failure(self, image_dir: Path):
        """存在失败项时响应不能标记为成功"""
        from batch_image_optimizer.mcp_server import MCPResponseBuilder

        inputs = [
            load_image_input(image_dir / "a.png"),
            load_image_input(image_dir / "broken.webp"),
        ]
        job = BatchOrchestrator().run(inputs, 80)

        response = MCPResponseBuilder.batch(job, [])

        assert response["success"] is False
        assert response["status"] == "completed"
        assert len(response["results"]) == 1
        assert response["failures"][0]["error_type"] == "DecodeError"


class TestOptimizeImagesTool:
    """optimize_images 工具测试"""

    def test_writes_optimized_files(self, image_dir: Path):
        """输出写到输入旁边，失败项与读取错误都带标签"""
        from batch_image_optimizer.mcp_server import optimize_images

        paths = [
            str(image_dir / "a.png"),
            str(image_dir / "a.jpg"),
            str(image_dir / "broken.webp"),
            str(image_dir / "missing.png"),
        ]

        response = _call(optimize_images, paths, 80)

        assert [Path(p).name for p in response["output_paths"]] == [
            "a-optimized.png",
            "a-optimized.jpg",
        ]
        assert all(Path(p).exists() for p in response["output_paths"])
        assert response["success"] is False
        assert [f["error_type"] for f in response["failures"]] == [
            "DecodeError",
            "LoadError",
        ]
        assert [r["original_name"] for r in response["results"]] == ["a.png", "a.jpg"]

    def test_existing_output_is_not_overwritten(self, image_dir: Path):
        """已存在的同名文件保持不变，新输出追加序号"""
        from batch_image_optimizer.mcp_server import optimize_images

        existing = image_dir / "a-optimized.png"
        existing.write_bytes(b"user data")

        response = _call(optimize_images, [str(image_dir / "a.png")], 80)

        assert [Path(p).name for p in response["output_paths"]] == [
            "a-optimized-1.png"
        ]
        assert existing.read_bytes() == b"user data"

    def test_names_are_unique_per_directory(self, tmp_path: Path, png_bytes):
        """不同目录中的同名输入各自得到不带序号的输出名"""
        from batch_image_optimizer.mcp_server import optimize_images

        paths = []
        for folder in ("one", "two"):
            (tmp_path / folder).mkdir()
            (tmp_path / folder / "a.png").write_bytes(png_bytes)
            paths.append(str(tmp_path / folder / "a.png"))

        response = _call(optimize_images, paths, 80)

        assert response["output_paths"] == [
            str(tmp_path / "one" / "a-optimized.png"),
            str(tmp_path / "two" / "a-optimized.png"),
        ]

    def test_shared_output_dir_suffixes_collisions(self, tmp_path: Path, png_bytes):
        """指定统一输出目录时，同名输出按顺序追加序号"""
        from batch_image_optimizer.mcp_server import optimize_images

        paths = []
        for folder in ("one", "two"):
            (tmp_path / folder).mkdir()
            (tmp_path / folder / "a.png").write_bytes(png_bytes)
            paths.append(str(tmp_path / folder / "a.png"))
        out_dir = tmp_path / "out"

        response = _call(optimize_images, paths, 80, str(out_dir))

        assert response["success"] is True
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "a-optimized-1.png",
            "a-optimized.png",
        ]


class TestOptimizeToArchiveTool:
    """optimize_to_archive 工具测试"""

    def test_directory_target_uses_default_name(self, image_dir: Path):
        """归档路径为目录时写出 optimized-images.zip"""
        from batch_image_optimizer.mcp_server import optimize_to_archive

        out_dir = image_dir / "out"
        out_dir.mkdir()

        response = _call(
            optimize_to_archive,
            [str(image_dir / "a.png"), str(image_dir / "a.jpg")],
            str(out_dir),
            70,
        )

        assert response["success"] is True
        assert response["status"] == "archived"
        assert response["archive_path"] == str(out_dir / "optimized-images.zip")
        with zipfile.ZipFile(response["archive_path"]) as zf:
            assert zf.namelist() == ["a-optimized.png", "a-optimized.jpg"]

    def test_archive_error_is_reported(self, image_dir: Path):
        """没有成功结果时归档失败，错误合并到批次响应中"""
        from batch_image_optimizer.mcp_server import optimize_to_archive

        target = image_dir / "result.zip"

        response = _call(
            optimize_to_archive,
            [str(image_dir / "broken.webp"), str(image_dir / "missing.png")],
            str(target),
        )

        assert response["success"] is False
        assert response["error_type"] == "ArchiveError"
        assert response["status"] == "failed"
        assert [f["error_type"] for f in response["failures"]] == [
            "DecodeError",
            "LoadError",
        ]
        assert not target.exists()
