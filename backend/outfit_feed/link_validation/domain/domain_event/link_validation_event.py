from dataclasses import dataclass
from typing import Optional
from outfit_feed.shared.domain.events import DomainEvent


@dataclass
class LinkSubmittedEvent(DomainEvent):
    """商品链接提交（pending）事件"""
    url: str
    outfit_id: Optional[str] = None


@dataclass
class LinkValidatedEvent(DomainEvent):
    """链接校验通过事件"""
    url: str
    domain: str
    title: Optional[str] = None
    price: Optional[str] = None


@dataclass
class LinkRejectedEvent(DomainEvent):
    """链接校验未通过事件（黑名单/网络失败/非HTML/意外异常）"""
    url: str
    reason: str  # e.g., "blacklisted", "network_failed", "non_html", "faulted"
    error: str
