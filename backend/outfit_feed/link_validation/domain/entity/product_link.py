from dataclasses import dataclass, field
import datetime
import uuid
from typing import List, Optional
from urllib.parse import urlparse

from outfit_feed.shared.domain.events import DomainEvent
from ..value_objects.link_status import LinkStatus
from ..value_objects.validation_metadata import ValidationMetadata
from ..domain_event.link_validation_event import LinkSubmittedEvent

MAX_OUTFIT_ID_LENGTH = 36  # 与 product_links.outfit_id 列宽一致


def hostname_of(url: str) -> str:
    """尽力解析出主机名，失败返回空字符串"""
    try:
        return (urlparse(url.strip()).hostname or '').lower()
    except (ValueError, AttributeError):
        return ''


@dataclass
class ProductLink:
    """
    商品链接实体，作为聚合根
    is_valid 不单独存储，始终由 status 推导
    """
    id: str
    url: str
    domain: str = ''
    status: LinkStatus = LinkStatus.PENDING
    metadata: Optional[ValidationMetadata] = None
    outfit_id: Optional[str] = None
    created_at: datetime.datetime = field(default_factory=datetime.datetime.now)
    updated_at: datetime.datetime = field(default_factory=datetime.datetime.now)

    _events: List[DomainEvent] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def submit(cls, url: str, outfit_id: Optional[str] = None) -> "ProductLink":
        """创建一个待校验（pending）的链接；outfit_id 超长时抛出 ValueError"""
        if outfit_id is not None and len(outfit_id) > MAX_OUTFIT_ID_LENGTH:
            raise ValueError(f"outfit_id must be at most {MAX_OUTFIT_ID_LENGTH} characters")
        link = cls(
            id=str(uuid.uuid4()),
            url=url,
            domain=hostname_of(url),
            outfit_id=outfit_id,
        )
        link._record_event(LinkSubmittedEvent(link_id=link.id, url=url, outfit_id=outfit_id))
        return link

    @property
    def is_valid(self) -> bool:
        return self.status == LinkStatus.VALID

    @property
    def is_pending(self) -> bool:
        return self.status == LinkStatus.PENDING

    def _record_event(self, event: DomainEvent):
        self._events.append(event)

    def get_uncommitted_events(self) -> List[DomainEvent]:
        """获取未提交的领域事件（用于后续发布）"""
        return list(self._events)

    def clear_events(self):
        """清空已处理的事件"""
        self._events.clear()

    def to_dict(self) -> dict:
        """对外 JSON 表示（沿用前端使用的驼峰字段名）"""
        return {
            "id": self.id,
            "outfitId": self.outfit_id,
            "url": self.url,
            "domain": self.domain,
            "status": self.status.value,
            "isValid": self.is_valid,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
