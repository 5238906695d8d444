from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .link_status import LinkStatus, ValidationState
from .product_metadata import ProductMetadata
from .validation_metadata import FailureMetadata, SuccessMetadata, ValidationMetadata


@dataclass(frozen=True)
class ValidationOutcome:
    """
    单次校验尝试的终态结果
    status / is_valid 均由 state 推导，写回记录时两者始终一致
    """
    state: ValidationState
    metadata: ValidationMetadata
    domain: Optional[str] = None

    @classmethod
    def valid(cls, domain: str, product: ProductMetadata, validated_at: datetime) -> "ValidationOutcome":
        return cls(
            state=ValidationState.VALID,
            metadata=SuccessMetadata.from_product(product, validated_at),
            domain=domain,
        )

    @classmethod
    def invalid(cls, state: ValidationState, error: str, validated_at: datetime) -> "ValidationOutcome":
        if state == ValidationState.VALID:
            raise ValueError("失败结果不能使用 VALID 状态")
        return cls(state=state, metadata=FailureMetadata(error=error, validated_at=validated_at))

    @property
    def status(self) -> LinkStatus:
        return LinkStatus.VALID if self.state == ValidationState.VALID else LinkStatus.INVALID

    @property
    def is_valid(self) -> bool:
        return self.status == LinkStatus.VALID

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.metadata, FailureMetadata):
            return self.metadata.error
        return None

    def to_update_fields(self) -> dict:
        """生成一次完整的部分更新字段集"""
        fields = {
            "status": self.status,
            "is_valid": self.is_valid,
            "metadata": self.metadata,
        }
        if self.is_valid and self.domain:
            fields["domain"] = self.domain
        return fields
