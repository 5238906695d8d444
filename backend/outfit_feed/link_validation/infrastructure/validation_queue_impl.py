# infrastructure/validation_queue_impl.py
import logging
import threading
from queue import Empty, Queue
from typing import Callable, Dict, List, Optional

from outfit_feed.shared.logging_config import get_error_logger
from ..domain.demand_interface.i_job_queue import IJobQueue
from ..domain.value_objects.queued_job import QueuedJob
from .rate_limiter import TokenBucketRateLimiter


class ValidationQueueImpl(IJobQueue):
    """
    进程内任务队列实现 - 固定数量的 worker 线程 + 共享令牌桶限速

    - 至少一次投递：处理函数抛出异常（如数据库写入失败）时按线性退避重新入队，
      最多投递 max_attempts 次，之后记录错误日志并丢弃；
    - 进程退出时队列中未处理的任务会丢失，依靠 pending 扫描重新入队。
    """

    def __init__(
        self,
        concurrency: int = 5,
        rate_limiter: Optional[TokenBucketRateLimiter] = None,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        after_job: Optional[Callable[[], None]] = None,
        poll_interval: float = 0.5
    ):
        """
        参数:
            concurrency: worker 线程数
            rate_limiter: 共享限速器，None 表示不限速
            max_attempts: 单个任务最多投递次数
            retry_delay: 重试退避基数(秒)，第 n 次失败后等待 n * retry_delay
            after_job: 每个任务结束后在 worker 线程中调用（例如释放线程内的数据库会话）
            poll_interval: worker 等待新任务的轮询间隔(秒)
        """
        if concurrency < 1:
            raise ValueError("concurrency 必须 >= 1")
        if max_attempts < 1:
            raise ValueError("max_attempts 必须 >= 1")

        self._concurrency = concurrency
        self._rate_limiter = rate_limiter
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._after_job = after_job
        self._poll_interval = poll_interval

        self._queue: Queue = Queue()
        self._handlers: Dict[str, Callable[[dict], object]] = {}
        self._threads: List[threading.Thread] = []
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

        self._logger = logging.getLogger(__name__)
        self._error_logger = get_error_logger()

    def register(self, job_name: str, handler: Callable[[dict], object]) -> None:
        """为任务名注册处理函数"""
        self._handlers[job_name] = handler

    def enqueue(self, job_name: str, payload: dict) -> None:
        """添加任务到队列"""
        self._queue.put(QueuedJob(job_name=job_name, payload=dict(payload)))

    def start(self) -> None:
        """启动 worker 线程（重复调用无副作用）"""
        with self._lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._threads = []
            for i in range(self._concurrency):
                t = threading.Thread(
                    target=self._worker_loop,
                    name=f"validation-worker-{i}",
                    daemon=True
                )
                self._threads.append(t)
                t.start()
        self._logger.info(f"校验队列已启动: {self._concurrency} 个 worker")

    def stop(self, timeout: Optional[float] = None) -> None:
        """停止 worker，正在执行的任务会执行完"""
        self._stop_event.set()
        with self._lock:
            threads = list(self._threads)
            self._threads = []
        for t in threads:
            t.join(timeout)

    def join(self, timeout: Optional[float] = None) -> bool:
        """等待所有已入队（含重试）的任务处理完"""
        with self._queue.all_tasks_done:
            if timeout is None:
                while self._queue.unfinished_tasks:
                    self._queue.all_tasks_done.wait()
                return True
            return self._queue.all_tasks_done.wait_for(
                lambda: self._queue.unfinished_tasks == 0, timeout
            )

    def size(self) -> int:
        """返回队列中等待的任务数量"""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

# ---------------------  内部方法：worker 循环与分发 ---------------------

    def _worker_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                job = self._queue.get(timeout=self._poll_interval)
            except Empty:
                continue

            try:
                self._dispatch(job)
            finally:
                self._queue.task_done()

    def _dispatch(self, job: QueuedJob) -> None:
        handler = self._handlers.get(job.job_name)
        if handler is None:
            self._error_logger.error(
                f"未注册的任务类型，已丢弃: {job.job_name}",
                extra={'job_name': job.job_name, 'payload': job.payload}
            )
            return

        # 每个任务开始前先拿令牌
        if self._rate_limiter is not None:
            self._rate_limiter.acquire()

        try:
            handler(job.payload)
            self._logger.debug(f"任务完成: {job.job_name} (第{job.attempt}次投递)")

        except Exception as e:
            self._handle_failure(job, e)

        finally:
            if self._after_job is not None:
                try:
                    self._after_job()
                except Exception as e:
                    self._error_logger.error(f"after_job 回调失败: {str(e)}")

    def _handle_failure(self, job: QueuedJob, error: Exception) -> None:
        if job.attempt >= self._max_attempts:
            self._error_logger.error(
                f"任务失败且重试次数已用尽: {job.job_name} - {type(error).__name__}: {str(error)}",
                extra={'job_name': job.job_name, 'payload': job.payload, 'attempts': job.attempt}
            )
            return

        delay = self._retry_delay * job.attempt
        self._logger.warning(
            f"任务失败，{delay:.1f}秒后重试: {job.job_name} "
            f"(第{job.attempt}/{self._max_attempts}次) - {str(error)}"
        )
        # 在当前任务 task_done 之前重新入队，join() 不会提前返回
        self._stop_event.wait(delay)
        self._queue.put(QueuedJob(
            job_name=job.job_name,
            payload=job.payload,
            attempt=job.attempt + 1
        ))
