from abc import ABC, abstractmethod
from typing import Callable, Optional


class IJobQueue(ABC):
    """
    任务队列接口 - 缓冲校验请求并在有限并发与速率上限下分发给 worker
    投递语义: 至少一次（at-least-once），处理函数需可重复执行
    """

    @abstractmethod
    def register(self, job_name: str, handler: Callable[[dict], object]) -> None:
        """为任务名注册处理函数，处理函数接收 payload 字典"""
        pass

    @abstractmethod
    def enqueue(self, job_name: str, payload: dict) -> None:
        """添加任务到队列"""
        pass

    @abstractmethod
    def start(self) -> None:
        """启动 worker"""
        pass

    @abstractmethod
    def stop(self, timeout: Optional[float] = None) -> None:
        """停止 worker（已出队的任务会执行完）"""
        pass

    @abstractmethod
    def join(self, timeout: Optional[float] = None) -> bool:
        """等待队列清空，返回是否在超时前清空"""
        pass

    @abstractmethod
    def size(self) -> int:
        """返回队列中等待的任务数量"""
        pass
