from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, Tuple

from outfit_feed.shared.domain.events import DomainEvent

# (message, level)；level 取值 DEBUG/INFO/SUCCESS/WARNING/ERROR
FormattedMessage = Tuple[str, str]


class BaseEventHandler(ABC):
    """
    事件处理器基类
    负责把领域事件转换为统一的日志条目，子类决定条目的去向
    """

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        pass

    def _format_event_to_log(self, event: DomainEvent) -> dict:
        message, level = self._get_message_and_level(event)
        return {
            "timestamp": self._format_timestamp(event.timestamp),
            "level": level,
            "message": message,
            "event_type": event.event_type,
            "link_id": event.link_id,
            "data": event.data
        }

    def _get_message_and_level(self, event: DomainEvent) -> FormattedMessage:
        formatters: Dict[str, Callable[[dict], FormattedMessage]] = {
            "LinkSubmittedEvent": self._format_submitted,
            "LinkValidatedEvent": self._format_validated,
            "LinkRejectedEvent": self._format_rejected,
        }
        formatter = formatters.get(event.event_type)
        if formatter is None:
            return f"事件: {event.event_type}", "DEBUG"
        return formatter(event.data)

    @staticmethod
    def _format_submitted(data: dict) -> FormattedMessage:
        return (
            f"▶ 链接提交: {data.get('url', 'N/A')} [outfit: {data.get('outfit_id') or '-'}]",
            "INFO"
        )

    @staticmethod
    def _format_validated(data: dict) -> FormattedMessage:
        price = data.get('price')
        price_info = f", 价格: {price}" if price else ""
        return (
            f"✓ 校验通过: {data.get('title') or '无标题'} ({data.get('domain', '')}{price_info})\n"
            f"  URL: {data.get('url', '')}",
            "SUCCESS"
        )

    @staticmethod
    def _format_rejected(data: dict) -> FormattedMessage:
        reason = data.get('reason', 'unknown')
        # 黑名单、网络失败、非HTML 都是预期内的结果，只有意外异常记为 ERROR
        level = "ERROR" if reason == "faulted" else "WARNING"
        return (
            f"✗ 校验失败 [{reason}]: {data.get('url', '')}\n"
            f"  错误: {data.get('error', '')}",
            level
        )

    @staticmethod
    def _format_timestamp(timestamp: datetime) -> str:
        if not isinstance(timestamp, datetime):
            return str(timestamp)
        return timestamp.strftime('%Y-%m-%d %H:%M:%S')
