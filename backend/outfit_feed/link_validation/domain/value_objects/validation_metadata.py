"""
校验结果元信息 - 封闭的二选一类型
- SuccessMetadata: 校验通过，携带抽取到的商品信息
- FailureMetadata: 校验失败，携带人类可读的错误原因

持久化为 JSON：
    {"title": ..., "image": ..., "price": ..., "validatedAt": ...}
    {"error": ..., "validatedAt": ...}
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from .product_metadata import ProductMetadata


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_time(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None


@dataclass(frozen=True)
class SuccessMetadata:
    title: Optional[str]
    image: Optional[str]
    price: Optional[str]
    validated_at: datetime

    @classmethod
    def from_product(cls, product: ProductMetadata, validated_at: datetime) -> "SuccessMetadata":
        return cls(
            title=product.title,
            image=product.image,
            price=product.price,
            validated_at=validated_at,
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "image": self.image,
            "price": self.price,
            "validatedAt": _format_time(self.validated_at),
        }


@dataclass(frozen=True)
class FailureMetadata:
    error: str
    validated_at: datetime

    def to_dict(self) -> dict:
        return {
            "error": self.error,
            "validatedAt": _format_time(self.validated_at),
        }


ValidationMetadata = Union[SuccessMetadata, FailureMetadata]


def metadata_from_dict(data: Optional[dict]) -> Optional[ValidationMetadata]:
    """从持久化的 JSON 还原元信息；None 表示还没有完成过任何校验"""
    if not data:
        return None

    validated_at = _parse_time(data.get("validatedAt"))
    if "error" in data:
        return FailureMetadata(error=str(data.get("error") or ""), validated_at=validated_at)

    return SuccessMetadata(
        title=data.get("title"),
        image=data.get("image"),
        price=data.get("price"),
        validated_at=validated_at,
    )
