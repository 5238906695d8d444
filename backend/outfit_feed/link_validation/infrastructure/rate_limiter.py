"""
令牌桶限速器
所有 worker 线程共享一个实例，限制每秒启动的校验数量，避免冲击第三方站点。
"""

import threading
import time
from typing import Callable, Optional


class TokenBucketRateLimiter:
    """
    令牌桶：容量 capacity，每秒补充 rate 个令牌
    acquire() 在锁内完成“补充-检查-扣减”，保证多线程下不会超发
    """

    def __init__(
        self,
        rate: float,
        capacity: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if rate <= 0:
            raise ValueError("rate 必须 > 0")
        self._rate = float(rate)
        self._capacity = float(capacity if capacity is not None else max(1.0, rate))
        self._clock = clock
        self._sleep = sleep
        self._tokens = self._capacity
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
            self._last_refill = now

    def acquire(self, timeout: Optional[float] = None) -> bool:
        """
        阻塞直到拿到一个令牌

        参数:
            timeout: 最长等待秒数，None 表示一直等

        返回:
            是否拿到令牌
        """
        deadline = None if timeout is None else self._clock() + timeout
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return True
                wait = (1 - self._tokens) / self._rate

            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    return False
                wait = min(wait, remaining)
            # 锁外等待，其他线程可以继续检查
            self._sleep(wait)
