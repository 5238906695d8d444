# shared/event_handlers/logging_handler.py
from typing import Dict, List, Optional
from collections import deque
from threading import Lock
import logging
from .base_event_handler import BaseEventHandler
from outfit_feed.shared.domain.events import DomainEvent

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class LoggingEventHandler(BaseEventHandler):
    """
    日志事件处理器
    职责：
    1. 捕获领域事件并转换为日志格式，写入业务日志 domain.link_validation
    2. 按链接ID分组存储日志到内存队列
    3. 提供日志查询接口供API调用
    """

    def __init__(self, max_logs_per_link: int = 100, logger: Optional[logging.Logger] = None):
        """
        参数:
            max_logs_per_link: 每个链接最多保留的日志条数（超出则丢弃最旧的）
            logger: 业务日志 Logger，默认 domain.link_validation
        """
        # 每个链接的日志队列: {link_id: deque}
        self._link_logs: Dict[str, deque] = {}
        self._max_logs_per_link = max_logs_per_link
        # 多个 worker 线程会并发发布事件
        self._lock = Lock()
        self._logger = logger or logging.getLogger('domain.link_validation')

    def handle(self, event: DomainEvent) -> None:
        """
        处理事件：转换为日志格式并存储
        """
        link_id = getattr(event, 'link_id', 'unknown_link')
        log_entry = self._format_event_to_log(event)

        with self._lock:
            if link_id not in self._link_logs:
                self._link_logs[link_id] = deque(maxlen=self._max_logs_per_link)
            self._link_logs[link_id].append(log_entry)

        self._logger.log(
            LEVELS.get(log_entry['level'], logging.INFO),
            log_entry['message'],
            extra={
                'event_type': log_entry['event_type'],
                'link_id': link_id,
                'data': log_entry['data'],
            }
        )

# -------------------- 日志查询接口 --------------------

    def get_logs(self, link_id: str, last_n: Optional[int] = None, level: Optional[str] = None) -> List[dict]:
        """
        获取链接日志

        参数:
            link_id: 链接ID
            last_n: 获取最近N条（在级别过滤之后），None表示全部
            level: 只返回该级别 (DEBUG/INFO/SUCCESS/WARNING/ERROR)，None表示不过滤
        """
        with self._lock:
            logs = list(self._link_logs.get(link_id, deque()))

        if level:
            logs = [log for log in logs if log['level'] == level.upper()]
        if last_n:
            return logs[-last_n:]
        return logs

    def has_errors(self, link_id: str) -> bool:
        """链接是否出现过 ERROR 级别日志（意外异常）"""
        return bool(self.get_logs(link_id, level='ERROR'))
