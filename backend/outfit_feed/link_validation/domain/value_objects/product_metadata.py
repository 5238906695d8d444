from dataclasses import dataclass
from typing import Optional

MAX_TITLE_LENGTH = 200
MAX_IMAGE_LENGTH = 500
MAX_PRICE_LENGTH = 50


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return value[:limit]


@dataclass(frozen=True)
class ProductMetadata:
    """从商品页面抽取的元信息，所有字段均可为空"""
    title: Optional[str] = None
    image: Optional[str] = None
    price: Optional[str] = None

    @classmethod
    def clipped(cls, title: Optional[str], image: Optional[str], price: Optional[str]) -> "ProductMetadata":
        """截断超长字段，防止恶意页面塞入超大内容"""
        return cls(
            title=_clip(title, MAX_TITLE_LENGTH),
            image=_clip(image, MAX_IMAGE_LENGTH),
            price=_clip(price, MAX_PRICE_LENGTH),
        )
