"""批量处理器模块。

把一批输入分发到解码与编码，按输入顺序收集结果，并管理批次生命周期。
"""

import asyncio
import itertools
import threading
from collections.abc import Iterable

from ..config import get_config
from ..core.decoder import Decoder
from ..core.encoder import Encoder, clamp_quality
from ..exceptions import (
    ArchiveError,
    DecodeError,
    EncodeError,
    ErrorHandler,
    OptimizerError,
    ValidationError,
)
from ..models.constants import ValidationLimits
from ..models.image_input import ImageInput
from ..models.optimization_result import (
    ARCHIVABLE_STATUSES,
    BatchJob,
    BatchStatus,
    ItemFailure,
    OptimizationResult,
)
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .archive import ArchiveBuilder, build_entries
from .concurrent_executor import ConcurrentExecutor


logger = get_logger()


class BatchOrchestrator:
    """批量图像优化调度器

    每个输入独立执行 解码→编码，单项失败不会中断其他项。
    只有在全部输入都失败时批次才视为失败。

    新批次开始时，仍在处理中的旧批次被标记为 superseded，
    其结果不会进入新批次，也不会成为 current_job。
    """

    def __init__(
        self,
        max_workers: int | None = None,
        decoder: Decoder | None = None,
        encoder: Encoder | None = None,
        archive_builder: ArchiveBuilder | None = None,
    ):
        """初始化调度器

        Args:
            max_workers: 最大并发数，None 使用配置默认值
            decoder: 解码器实例
            encoder: 编码器实例
            archive_builder: 归档构建器实例
        """
        self.max_workers = max_workers or get_config().optimizer.MAX_WORKERS
        self.decoder = decoder or Decoder()
        self.encoder = encoder or Encoder()
        self.archive_builder = archive_builder or ArchiveBuilder()
        self.concurrent_executor: ConcurrentExecutor[
            ImageInput, OptimizationResult | ItemFailure
        ] = ConcurrentExecutor(self.max_workers)

        self._lock = threading.Lock()
        self._generations = itertools.count(1)
        self._current: BatchJob | None = None
        self._cancel_events: dict[str, threading.Event] = {}

    @property
    def current_job(self) -> BatchJob | None:
        """最近一次开始的批次"""
        return self._current

    def run(self, inputs: Iterable[ImageInput], quality: int | None = None) -> BatchJob:
        """处理一批输入

        Args:
            inputs: 有序的输入序列
            quality: 质量 1-100，超出范围会被截断；None 使用配置默认值

        Returns:
            BatchJob: 批次结果，results[i] 对应 inputs[i]

        Raises:
            ValidationError: 输入不是 ImageInput 或数量超过上限
        """
        inputs = self._validate_inputs(inputs)
        if quality is None:
            quality = get_config().optimizer.DEFAULT_QUALITY
        quality = clamp_quality(quality)

        job, cancel_event = self._start_job(inputs, quality)
        logger.info(f"开始批次 {job.job_id}: {len(inputs)} 个文件，质量 {quality}")

        try:
            results = self.concurrent_executor.execute_tasks(
                items=inputs,
                task_function=lambda index, item: self._process_item(
                    index, item, quality
                ),
                error_handler=self._handle_item_error,
                cancel_event=cancel_event,
            )
        finally:
            with self._lock:
                self._cancel_events.pop(job.job_id, None)

        return self._finish_job(job, results)

    async def run_async(
        self, inputs: Iterable[ImageInput], quality: int | None = None
    ) -> BatchJob:
        """在事件循环中等待批次完成，不阻塞循环"""
        return await asyncio.to_thread(self.run, list(inputs), quality)

    def archive(self, job: BatchJob) -> bytes:
        """把已完成批次的成功结果打包为归档

        归档失败只影响本次归档，批次结果保持不变，可以重试。

        Raises:
            ArchiveError: 批次状态不允许归档、没有成功结果或压缩失败
        """
        with self._lock:
            if job.status not in ARCHIVABLE_STATUSES:
                raise ArchiveError(
                    MessageFormatter.invalid_transition(
                        job.job_id, job.status.value, "归档"
                    )
                )
            job.status = BatchStatus.ARCHIVING

        try:
            data = self.archive_builder.build(build_entries(job.successes))
        except ArchiveError as e:
            job.status = BatchStatus.ARCHIVE_FAILED
            job.archive_error = str(e)
            logger.warning(MessageFormatter.operation_failed("归档", job.job_id, e))
            raise

        job.status = BatchStatus.ARCHIVED
        job.archive_error = None
        return data

    async def archive_async(self, job: BatchJob) -> bytes:
        """在事件循环中等待归档完成"""
        return await asyncio.to_thread(self.archive, job)

    def _validate_inputs(self, inputs: Iterable[ImageInput]) -> list[ImageInput]:
        """验证输入列表"""
        inputs = list(inputs)
        if len(inputs) > ValidationLimits.MAX_BATCH_FILES:
            raise ValidationError(
                MessageFormatter.validation_error(
                    "inputs", len(inputs), f"最多 {ValidationLimits.MAX_BATCH_FILES} 个"
                )
            )
        for index, item in enumerate(inputs):
            if not isinstance(item, ImageInput):
                raise ValidationError(
                    MessageFormatter.validation_error(
                        f"inputs[{index}]", type(item).__name__, "期望 ImageInput"
                    )
                )
        return inputs

    def _start_job(
        self, inputs: list[ImageInput], quality: int
    ) -> tuple[BatchJob, threading.Event]:
        """创建新批次并取代仍在处理中的旧批次"""
        with self._lock:
            previous = self._current
            if previous is not None and previous.status == BatchStatus.PROCESSING:
                previous.status = BatchStatus.SUPERSEDED
                previous.error = "已被新批次取代"
                if event := self._cancel_events.get(previous.job_id):
                    event.set()
                logger.info(f"批次 {previous.job_id} 已被取代")

            job = BatchJob(
                generation=next(self._generations),
                inputs=inputs,
                quality=quality,
                status=BatchStatus.PROCESSING,
            )
            cancel_event = threading.Event()
            self._cancel_events[job.job_id] = cancel_event
            self._current = job

        return job, cancel_event

    def _finish_job(
        self,
        job: BatchJob,
        results: list[OptimizationResult | ItemFailure | None],
    ) -> BatchJob:
        """按失败策略确定批次最终状态"""
        with self._lock:
            if job.status == BatchStatus.SUPERSEDED:
                # 过期批次的结果直接丢弃
                logger.debug(f"丢弃过期批次 {job.job_id} 的结果")
                return job

            job.results = [r for r in results if r is not None]

            if job.inputs and job.get_success_count() == 0:
                job.status = BatchStatus.FAILED
                job.error = "所有文件处理都失败"
            else:
                job.status = BatchStatus.COMPLETED

        logger.info(
            f"批次 {job.job_id} {job.status.value}: "
            f"成功 {job.get_success_count()}，失败 {job.get_failure_count()}"
        )
        return job

    def _process_item(
        self, index: int, item: ImageInput, quality: int
    ) -> OptimizationResult:
        """处理单个输入：解码→编码"""
        try:
            raster = self.decoder.decode(item.data, item.mime_type, item.name)
        except OptimizerError:
            raise
        except Exception as e:
            raise DecodeError(f"解码失败: {e}", item.name) from e

        try:
            encoded = self.encoder.encode(raster, quality, item.mime_type, item.name)
        except OptimizerError:
            raise
        except Exception as e:
            raise EncodeError(f"编码失败: {e}", item.name) from e

        result = OptimizationResult(
            original_name=item.name,
            original_size=item.size,
            optimized_bytes=encoded.data,
            optimized_size=encoded.size,
            output_mime_type=encoded.mime_type,
            original_bytes=item.data,
            width=raster.width,
            height=raster.height,
        )
        logger.debug(f"处理成功 [{index}] {item.name}: {result.get_summary()}")
        return result

    @staticmethod
    def _handle_item_error(
        error: Exception, index: int, item: ImageInput
    ) -> ItemFailure:
        return ErrorHandler.to_failure(error, index, item.name)


def optimize_images(
    inputs: Iterable[ImageInput],
    quality: int | None = None,
    max_workers: int | None = None,
) -> BatchJob:
    """便捷函数：用一次性调度器处理一批输入"""
    return BatchOrchestrator(max_workers=max_workers).run(inputs, quality)
