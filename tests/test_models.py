"""数据模型、命名与配置测试。"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from batch_image_optimizer.config import get_config, reset_config
from batch_image_optimizer.models.constants import (
    get_extension,
    is_supported_input,
    normalize_mime_type,
)
from batch_image_optimizer.models.image_input import ImageInput
from batch_image_optimizer.models.optimization_result import (
    BatchJob,
    BatchStatus,
    ItemFailure,
    OptimizationResult,
    reduction_percent,
)
from batch_image_optimizer.utils.naming_helpers import (
    UniqueNameRegistry,
    derive_output_name,
)


def _result(name: str = "a.png", original: int = 1000, optimized: int = 400):
    return OptimizationResult(
        original_name=name,
        original_size=original,
        optimized_bytes=b"x" * optimized,
        optimized_size=optimized,
        output_mime_type="image/png",
    )


class TestReductionPercent:
    """体积缩减百分比测试"""

    @pytest.mark.parametrize(
        "original, optimized, expected",
        [
            (1000, 400, "60.0"),
            (1000, 1000, "0.0"),
            (1000, 1200, "-20.0"),
            (3, 1, "66.7"),
            (0, 0, "0.0"),
            (100000, 100001, "-0.0"),
        ],
    )
    def test_reduction_percent(self, original, optimized, expected):
        assert reduction_percent(original, optimized) == expected

    def test_tiny_increase_stays_visible(self):
        """微小的体积增大与无变化可以区分"""
        assert reduction_percent(100000, 100001) != reduction_percent(100000, 100000)

    def test_result_property(self):
        assert _result().reduction_percent == "60.0"


class TestOptimizationResult:
    """单项结果测试"""

    def test_to_record(self):
        assert _result().to_record() == {
            "original_name": "a.png",
            "original_size": 1000,
            "optimized_size": 400,
            "output_mime_type": "image/png",
            "reduction_percent": "60.0",
        }

    def test_download_name(self):
        assert _result("shot.final.png").download_name == "shot.final-optimized.png"

    def test_summary_uses_human_sizes(self):
        summary = _result(original=2048, optimized=1024).get_summary()
        assert "KiB" in summary
        assert "50.0%" in summary
        assert "节省 1.0 KiB" in summary

    def test_size_delta_negative_when_larger(self):
        assert _result(original=100, optimized=150).get_size_delta() == -50

    def test_is_immutable(self):
        with pytest.raises(PydanticValidationError):
            _result().optimized_size = 1


class TestImageInput:
    """输入模型测试"""

    def test_size_defaults_to_data_length(self):
        item = ImageInput(name="a.png", data=b"12345", mime_type="image/png")
        assert item.size == 5

    def test_explicit_size_kept(self):
        item = ImageInput(name="a.png", data=b"12345", mime_type="image/png", size=9)
        assert item.size == 9

    def test_is_immutable(self):
        item = ImageInput(name="a.png", data=b"1", mime_type="image/png")
        with pytest.raises(PydanticValidationError):
            item.name = "b.png"


class TestBatchJob:
    """批次模型测试"""

    def test_counts_and_summary(self):
        failure = ItemFailure(
            index=1, name="b.png", error_type="DecodeError", message="损坏"
        )
        job = BatchJob(
            inputs=[
                ImageInput(name="a.png", data=b"1", mime_type="image/png"),
                ImageInput(name="b.png", data=b"2", mime_type="image/png"),
            ],
            quality=80,
            results=[_result(), failure],
            status=BatchStatus.COMPLETED,
        )

        assert job.get_success_count() == 1
        assert job.get_failure_count() == 1
        assert job.failures == [failure]
        assert not job.is_fully_successful()
        assert "1/2" in job.get_summary()
        assert job.get_overall_reduction_percent() == "60.0"

    def test_job_ids_are_unique(self):
        assert BatchJob(quality=80).job_id != BatchJob(quality=80).job_id


class TestMimeHelpers:
    """MIME 与扩展名工具测试"""

    def test_normalize_mime_type(self):
        assert normalize_mime_type("IMAGE/JPG") == "image/jpeg"
        assert normalize_mime_type("image/png; charset=binary") == "image/png"

    def test_supported_inputs(self):
        assert is_supported_input("image/webp")
        assert not is_supported_input("image/gif")

    def test_extensions(self):
        assert get_extension("image/jpeg") == "jpg"
        assert get_extension("image/png") == "png"


class TestNaming:
    """命名工具测试"""

    def test_derive_output_name(self):
        assert derive_output_name("a.jpeg", "image/jpeg") == "a-optimized.jpg"
        assert derive_output_name("dir/sub/a.png", "image/png") == "a-optimized.png"

    def test_registry_ignores_case(self):
        registry = UniqueNameRegistry()
        assert registry.claim("a-optimized.png") == "a-optimized.png"
        assert registry.claim("A-optimized.png") == "A-optimized-1.png"

    def test_registry_skips_taken_suffix(self):
        registry = UniqueNameRegistry(["a-1.png"])
        assert registry.claim("a.png") == "a.png"
        assert registry.claim("a.png") == "a-2.png"

    def test_registry_seeded_from_directory(self, tmp_path):
        (tmp_path / "A-optimized.png").write_bytes(b"x")
        registry = UniqueNameRegistry.for_directory(tmp_path)
        assert registry.claim("a-optimized.png") == "a-optimized-1.png"

    def test_registry_for_missing_directory(self, tmp_path):
        registry = UniqueNameRegistry.for_directory(tmp_path / "missing")
        assert registry.claim("a.png") == "a.png"


class TestConfig:
    """配置测试"""

    def test_defaults(self):
        settings = get_config()
        assert settings.optimizer.DEFAULT_QUALITY == 85
        assert settings.optimizer.ARCHIVE_NAME == "optimized-images.zip"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("BIO_MAX_WORKERS", "2")
        monkeypatch.setenv("BIO_LOG_LEVEL", "debug")
        reset_config()

        settings = get_config()
        assert settings.optimizer.MAX_WORKERS == 2
        assert settings.logging.LOG_LEVEL == "DEBUG"
