from typing import Dict, List, Optional
from ...domain.demand_interface.i_link_repository import ILinkRepository
from ...domain.entity.product_link import ProductLink
from ...domain.value_objects.link_status import LinkStatus
from ...domain.value_objects.validation_metadata import (
    FailureMetadata, SuccessMetadata, metadata_from_dict
)
from .i_link_dao import ILinkDao
from .models import ProductLinkModel

UPDATABLE_FIELDS = ("status", "is_valid", "domain", "metadata")


class LinkRepositoryImpl(ILinkRepository):
    """
    商品链接仓储实现
    """

    def __init__(self, dao: ILinkDao):
        self._dao = dao

    def create_link(self, link: ProductLink) -> None:
        self._dao.create_link(self._to_model(link))

    def get_link(self, link_id: str) -> Optional[ProductLink]:
        model = self._dao.get_link_by_id(link_id)
        if not model:
            return None
        return self._to_entity(model)

    def update_link(self, link_id: str, fields: dict) -> Optional[ProductLink]:
        """
        部分更新；status 与 is_valid 在这里统一换算，保证两者一致
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"不支持更新的字段: {sorted(unknown)}")

        values = {}
        if "status" in fields:
            status = LinkStatus(fields["status"])
            is_valid = status == LinkStatus.VALID
            if "is_valid" in fields and bool(fields["is_valid"]) != is_valid:
                raise ValueError(f"is_valid={fields['is_valid']} 与 status={status.value} 不一致")
            values["status"] = status.value
            values["is_valid"] = is_valid
        elif "is_valid" in fields:
            raise ValueError("is_valid 只能随 status 一起更新")

        if "domain" in fields:
            values["domain"] = fields["domain"]

        if "metadata" in fields:
            metadata = fields["metadata"]
            if isinstance(metadata, (SuccessMetadata, FailureMetadata)):
                metadata = metadata.to_dict()
            values["link_metadata"] = metadata

        model = self._dao.update_link(link_id, values)
        if not model:
            return None
        return self._to_entity(model)

    def list_pending(self) -> List[ProductLink]:
        models = self._dao.get_links_by_status(LinkStatus.PENDING.value)
        return [self._to_entity(m) for m in models]

    def list_by_outfit(self, outfit_id: str) -> List[ProductLink]:
        models = self._dao.get_links_by_outfit_id(outfit_id)
        return [self._to_entity(m) for m in models]

    def count_by_status(self) -> Dict[str, int]:
        counts = self._dao.count_by_status()
        return {status.value: counts.get(status.value, 0) for status in LinkStatus}

    # ------------------ 映射方法 ------------------

    def _to_model(self, link: ProductLink) -> ProductLinkModel:
        return ProductLinkModel(
            id=link.id,
            outfit_id=link.outfit_id,
            url=link.url,
            domain=link.domain,
            status=link.status.value,
            is_valid=link.is_valid,
            link_metadata=link.metadata.to_dict() if link.metadata else None,
            created_at=link.created_at,
            updated_at=link.updated_at
        )

    def _to_entity(self, model: ProductLinkModel) -> ProductLink:
        return ProductLink(
            id=model.id,
            url=model.url,
            domain=model.domain or '',
            status=LinkStatus(model.status),
            metadata=metadata_from_dict(model.link_metadata),
            outfit_id=model.outfit_id,
            created_at=model.created_at,
            updated_at=model.updated_at
        )
