"""并发执行器模块。

提供通用的并发任务执行功能，结果按输入索引收集。
"""

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ConcurrentExecutor(Generic[T, R]):
    """通用并发执行器

    各任务之间没有依赖，结果写入与输入索引对应的位置，
    因此返回顺序与完成顺序无关。
    """

    def __init__(self, max_workers: int = 4):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数
        """
        if max_workers <= 0:
            raise ValueError("max_workers 必须大于 0")
        self.max_workers = max_workers

    def execute_tasks(
        self,
        items: Sequence[T],
        task_function: Callable[[int, T], R],
        error_handler: Callable[[Exception, int, T], R],
        cancel_event: threading.Event | None = None,
    ) -> list[R | None]:
        """执行并发任务

        Args:
            items: 任务输入列表
            task_function: 任务函数，接收 (索引, 输入)
            error_handler: 任务抛出异常时生成该位置结果的函数
            cancel_event: 被设置后取消尚未开始的任务

        Returns:
            list: 与 items 等长的结果列表；被取消的位置为 None
        """
        if not items:
            return []

        results: list[R | None] = [None] * len(items)
        workers = min(self.max_workers, len(items))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            # 提交任务阶段
            future_to_index = self._submit_tasks(executor, items, task_function)

            # 收集结果阶段
            self._collect_results(
                future_to_index, items, results, error_handler, cancel_event
            )

        return results

    def _submit_tasks(
        self,
        executor: ThreadPoolExecutor,
        items: Sequence[T],
        task_function: Callable[[int, T], R],
    ) -> dict[Future[R], int]:
        """提交任务到执行器"""
        return {
            executor.submit(task_function, index, item): index
            for index, item in enumerate(items)
        }

    def _collect_results(
        self,
        future_to_index: dict[Future[R], int],
        items: Sequence[T],
        results: list[R | None],
        error_handler: Callable[[Exception, int, T], R],
        cancel_event: threading.Event | None,
    ) -> None:
        """收集任务执行结果，每个索引只写入一次"""
        for future in as_completed(future_to_index):
            index = future_to_index[future]

            if cancel_event is not None and cancel_event.is_set():
                cancelled = sum(1 for f in future_to_index if f.cancel())
                logger.debug(f"任务已取消，撤销 {cancelled} 个未开始的任务")
                return

            try:
                results[index] = future.result()
                logger.debug(f"任务 {index} 完成")
            except Exception as e:
                results[index] = error_handler(e, index, items[index])
