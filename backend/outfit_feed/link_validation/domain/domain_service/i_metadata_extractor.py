"""
写在领域服务的原因：
商品元信息的回退优先级、截断上限属于业务规则，不属于单个实体；
具体 HTML 解析通过 IHtmlParser 注入。
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from ..value_objects.product_metadata import ProductMetadata


class IMetadataExtractor(ABC):

    @abstractmethod
    def extract(self, html: Union[str, bytes, None], base_url: Optional[str] = None) -> ProductMetadata:
        """
        从HTML提取商品元信息
        领域逻辑:
        - title: og:title > meta title > <title>
        - image: og:image > twitter:image
        - price: 价格 meta > class 含 price 且带数字的元素 > 正则扫描
        - 截断 title/image/price 至 200/500/50 字符
        任何解析错误都吞掉，返回空字段
        """
        pass
