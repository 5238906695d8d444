import logging
import threading
from typing import Callable, Optional

from outfit_feed.shared.logging_config import get_error_logger


class PendingLinkSweeper:
    """
    定时扫描：每隔 interval 秒把所有 pending 链接重新入队
    重复入队是安全的（每次校验都会重新推导并覆盖状态）
    """

    def __init__(
        self,
        sweep: Callable[[], int],
        interval: float = 300.0,
        after_sweep: Optional[Callable[[], None]] = None
    ):
        """
        参数:
            sweep: 执行一次扫描并返回入队数量，通常是 LinkValidationService.sweep_pending
            interval: 扫描间隔(秒)
            after_sweep: 每次扫描后在扫描线程中调用（释放线程内的数据库会话）
        """
        self._sweep = sweep
        self._interval = interval
        self._after_sweep = after_sweep
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._logger = logging.getLogger(__name__)
        self._error_logger = get_error_logger()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="pending-link-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int:
        """执行一次扫描；出错时记录日志并返回 0，不影响下一轮"""
        try:
            count = self._sweep()
            self._logger.info(f"已将 {count} 个 pending 链接加入校验队列")
            return count
        except Exception as e:
            self._error_logger.error(f"pending 链接扫描失败: {type(e).__name__} - {str(e)}")
            return 0
        finally:
            if self._after_sweep is not None:
                try:
                    self._after_sweep()
                except Exception as e:
                    self._error_logger.error(f"after_sweep 回调失败: {str(e)}")

    def _run(self) -> None:
        # 先等一个周期，启动时的积压由调用方决定是否立即扫描
        while not self._stop_event.wait(self._interval):
            self.run_once()
