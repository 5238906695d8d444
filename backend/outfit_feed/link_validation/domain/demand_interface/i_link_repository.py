from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from ..entity.product_link import ProductLink


class ILinkRepository(ABC):
    """
    商品链接仓储接口
    负责领域对象 ProductLink 的持久化；不同 id 的并发调用必须安全
    """

    @abstractmethod
    def create_link(self, link: ProductLink) -> None:
        """保存新链接"""
        pass

    @abstractmethod
    def get_link(self, link_id: str) -> Optional[ProductLink]:
        """根据ID获取链接"""
        pass

    @abstractmethod
    def update_link(self, link_id: str, fields: dict) -> Optional[ProductLink]:
        """
        部分更新链接，返回更新后的链接；记录不存在时返回 None
        fields 可包含: status, is_valid, domain, metadata
        """
        pass

    @abstractmethod
    def list_pending(self) -> List[ProductLink]:
        """获取所有 pending 状态的链接"""
        pass

    @abstractmethod
    def list_by_outfit(self, outfit_id: str) -> List[ProductLink]:
        """获取某个穿搭下的所有链接"""
        pass

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """按状态统计链接数量 {"pending": n, "valid": n, "invalid": n}"""
        pass
