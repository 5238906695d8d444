import logging
from threading import Lock
from typing import Callable, Dict, Iterable, List

from .domain.events import DomainEvent

EventHandler = Callable[[DomainEvent], None]


class EventBus:
    """
    进程内事件总线
    校验 worker 与 HTTP 请求线程都会发布事件，订阅表的读写在锁内完成，
    处理函数在锁外调用；单个处理函数出错只记录日志，不影响发布方和其他处理函数。
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._lock = Lock()
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """订阅某一类事件（按类名，如 LinkValidatedEvent）"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        self._logger.debug(f"订阅事件: {event_type}")

    def subscribe_to_all(self, handler: EventHandler) -> None:
        """订阅所有事件"""
        with self._lock:
            self._global_handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event.event_type, ())) + list(self._global_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"事件处理失败: {event.event_type} - {str(e)}",
                    extra={'event': event.to_dict()}
                )

    def publish_all(self, events: Iterable[DomainEvent]) -> None:
        """按顺序发布一批事件（聚合根积压的事件）"""
        for event in events:
            self.publish(event)
