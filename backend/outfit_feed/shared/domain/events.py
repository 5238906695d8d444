"""
领域事件基类
放在 shared 中，event_handlers 只依赖这里的公共字段，不依赖具体业务模块。
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict

# 基类字段，不计入事件数据
BASE_FIELDS = ('link_id', 'timestamp')


@dataclass
class DomainEvent:
    """
    所有领域事件的基类，以链接ID为聚合标识

    timestamp 为 kw_only，子类可以继续声明无默认值的字段。
    """
    link_id: str
    timestamp: datetime = field(default_factory=datetime.now, kw_only=True)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    @property
    def data(self) -> Dict[str, Any]:
        """子类声明的业务字段"""
        return {k: v for k, v in asdict(self).items() if k not in BASE_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        """可直接序列化为 JSON 的完整表示"""
        return {
            "event_type": self.event_type,
            "link_id": self.link_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }
