"""批量图像优化 MCP 服务器。

把批量优化与归档暴露为 MCP 工具。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .engine.batch import BatchOrchestrator
from .exceptions import ArchiveError, OptimizerError
from .models.image_input import ImageInput
from .models.optimization_result import BatchJob, OptimizationResult
from .utils.file_helpers import load_image_input, write_bytes
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import UniqueNameRegistry


# MCP 服务器响应类型定义
MCPBatchResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> dict[str, Any]:
        """构建验证错误结果。"""
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message, error_type="validation", details=details
        )

    @staticmethod
    def archive_error(error: ArchiveError) -> dict[str, Any]:
        """构建归档错误结果。"""
        details = {"entry_name": error.entry_name} if error.entry_name else None
        return MCPResponseBuilder.error(
            message=error.message, error_type="ArchiveError", details=details
        )

    @staticmethod
    def batch(
        job: BatchJob,
        load_errors: list[dict[str, Any]],
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建批次结果。存在任何失败项时 success 为 False。"""
        result = {
            "success": job.is_fully_successful() and not load_errors,
            "status": job.status.value,
            "quality": job.quality,
            "summary": job.get_summary(),
            "results": [r.to_record() for r in job.successes],
            "failures": [f.to_record() for f in job.failures] + load_errors,
            "error": job.error,
        }
        if extra:
            result.update(extra)
        return result


# 配置日志
_settings = get_config()
configure_logging(_settings.logging.LOG_LEVEL, _settings.logging.LOG_FORMAT)
logger = get_logger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("批量图像优化服务")


def _new_orchestrator() -> BatchOrchestrator:
    """每次工具调用使用独立的调度器，并发调用之间互不取代"""
    return BatchOrchestrator()


def _load_inputs(
    input_paths: list[str],
) -> tuple[list[ImageInput], list[Path], list[dict[str, Any]]]:
    """读取输入文件，读取失败的路径单独记录"""
    inputs: list[ImageInput] = []
    loaded_paths: list[Path] = []
    load_errors: list[dict[str, Any]] = []
    for path in input_paths:
        try:
            inputs.append(load_image_input(path))
            loaded_paths.append(Path(path))
        except OSError as e:
            logger.warning(MessageFormatter.operation_failed("读取文件", path, e))
            load_errors.append(
                {"name": Path(path).name, "error_type": "LoadError", "message": str(e)}
            )
    return inputs, loaded_paths, load_errors


@mcp.tool()
def optimize_images(
    input_paths: list[str],
    quality: int | None = None,
    output_dir: str | None = None,
) -> MCPBatchResponse:
    """批量优化图像，写出 <文件名>-optimized.<扩展名>

    Args:
        input_paths: 输入图像路径列表（JPEG / PNG / WebP）
        quality: 压缩质量 1-100，超出范围会被截断；None 使用默认值 85
        output_dir: 输出目录（可选，默认与各输入文件同目录）

    Returns:
        dict: 每个文件的大小与缩减比例，以及带标签的失败项
    """
    try:
        inputs, loaded_paths, load_errors = _load_inputs(input_paths)
        job = _new_orchestrator().run(inputs, quality)

        # 每个输出目录一个登记表，已存在的文件不会被覆盖
        registries: dict[Path, UniqueNameRegistry] = {}
        written = []
        for path, result in zip(loaded_paths, job.results, strict=True):
            if not isinstance(result, OptimizationResult):
                continue
            target_dir = Path(output_dir) if output_dir else path.parent
            if target_dir not in registries:
                registries[target_dir] = UniqueNameRegistry.for_directory(target_dir)
            target = target_dir / registries[target_dir].claim(result.download_name)
            written.append(str(write_bytes(target, result.optimized_bytes)))

        return MCPResponseBuilder.batch(job, load_errors, {"output_paths": written})

    except OptimizerError as e:
        logger.error(MessageFormatter.operation_failed("批量优化", input_paths, e))
        return MCPResponseBuilder.validation_error(e.message, "input_paths")


@mcp.tool()
def optimize_to_archive(
    input_paths: list[str],
    archive_path: str,
    quality: int | None = None,
) -> MCPBatchResponse:
    """批量优化图像并把成功的结果打包为一个 ZIP 归档

    Args:
        input_paths: 输入图像路径列表（JPEG / PNG / WebP）
        archive_path: ZIP 输出路径；为目录时使用默认文件名 optimized-images.zip
        quality: 压缩质量 1-100，超出范围会被截断；None 使用默认值 85

    Returns:
        dict: 批次结果与归档路径；归档失败时包含 ArchiveError 信息
    """
    try:
        inputs, _, load_errors = _load_inputs(input_paths)
        orchestrator = _new_orchestrator()
        job = orchestrator.run(inputs, quality)
    except OptimizerError as e:
        logger.error(MessageFormatter.operation_failed("批量优化", input_paths, e))
        return MCPResponseBuilder.validation_error(e.message, "input_paths")

    target = Path(archive_path)
    if target.is_dir():
        registry = UniqueNameRegistry.for_directory(target)
        target = target / registry.claim(get_config().optimizer.ARCHIVE_NAME)

    try:
        archive_bytes = orchestrator.archive(job)
    except ArchiveError as e:
        response = MCPResponseBuilder.batch(job, load_errors)
        response.update(MCPResponseBuilder.archive_error(e))
        return response

    write_bytes(target, archive_bytes)
    return MCPResponseBuilder.batch(job, load_errors, {"archive_path": str(target)})


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动批量图像优化 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
