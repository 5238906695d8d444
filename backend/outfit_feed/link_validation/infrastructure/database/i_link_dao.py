from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from .models import ProductLinkModel


class ILinkDao(ABC):
    """
    Interface for Product Link Data Access Object
    """

    @abstractmethod
    def create_link(self, link: ProductLinkModel) -> None:
        """Create a new product link"""
        pass

    @abstractmethod
    def get_link_by_id(self, link_id: str) -> Optional[ProductLinkModel]:
        """Get a product link by ID"""
        pass

    @abstractmethod
    def update_link(self, link_id: str, values: dict) -> Optional[ProductLinkModel]:
        """Apply a partial update in one statement; None if the link does not exist"""
        pass

    @abstractmethod
    def get_links_by_status(self, status: str) -> List[ProductLinkModel]:
        """Get all links with the given status"""
        pass

    @abstractmethod
    def get_links_by_outfit_id(self, outfit_id: str) -> List[ProductLinkModel]:
        """Get all links attached to an outfit"""
        pass

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """Count links grouped by status"""
        pass
