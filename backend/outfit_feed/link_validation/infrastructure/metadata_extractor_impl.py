"""
模块职责（领域服务实现）
- 从任意（可能残缺、恶意的）HTML中尽力抽取商品标题、图片、价格；
- HTML 结构解析委托给 IHtmlParser，本模块只负责回退优先级与截断规则。

设计要点
- 标题：og:title > meta title > <title>；
- 图片：og:image > twitter:image，相对路径按页面URL转为绝对路径；
- 价格：价格 meta > class 含 price 且带数字的元素文本 > 正则扫描原始HTML中带引号的金额；
- 每个页面只解析一次，且只把前 max_parse_chars 个字符交给解析器；正则扫描是线性的，仍作用于全文；
- 抽取永远不会让校验失败：任何异常都吞掉并返回空字段。
"""

import logging
import re
from typing import Optional, Union
from urllib.parse import urljoin

from ..domain.demand_interface.i_html_parser import IHtmlParser
from ..domain.domain_service.i_metadata_extractor import IMetadataExtractor
from ..domain.value_objects.parsed_page import ParsedPage
from ..domain.value_objects.product_metadata import ProductMetadata

logger = logging.getLogger(__name__)

TITLE_META_KEYS = ('og:title', 'title')
IMAGE_META_KEYS = ('og:image', 'twitter:image')
PRICE_META_KEYS = ('product:price:amount', 'og:price:amount', 'product:price')
PRICE_CLASS_KEYWORD = 'price'

# 形如 "$49.99" / '€ 12,00' / "19.90" 的带引号金额
PRICE_PATTERN = re.compile(r'["\'](?:[$€£₺]?\s?\d+[.,]\d{2})["\']')
HAS_DIGIT = re.compile(r'\d')

DEFAULT_MAX_PARSE_CHARS = 512 * 1024


class MetadataExtractorImpl(IMetadataExtractor):
    def __init__(self, html_parser: IHtmlParser, max_parse_chars: int = DEFAULT_MAX_PARSE_CHARS):
        """
        参数:
            html_parser: HTML结构解析器
            max_parse_chars: 交给解析器的最大字符数，限制单个页面占用 worker 的时间
        """
        self._parser = html_parser
        self._max_parse_chars = max_parse_chars

    def extract(self, html: Union[str, bytes, None], base_url: Optional[str] = None) -> ProductMetadata:
        try:
            text = self._to_text(html)
            if not text:
                return ProductMetadata()

            page = self._parse(text[:self._max_parse_chars])
            meta_tags = page.meta_tags or {}

            title = self._first(meta_tags, TITLE_META_KEYS) or page.title
            image = self._resolve_image(self._first(meta_tags, IMAGE_META_KEYS), base_url)
            price = (
                self._first(meta_tags, PRICE_META_KEYS)
                or page.class_text
                or self._scan_price(text)
            )

            return ProductMetadata.clipped(title=title, image=image, price=price)

        except Exception as e:
            logger.debug(f"商品元信息抽取失败: {type(e).__name__} - {str(e)}")
            return ProductMetadata()

    def _parse(self, text: str) -> ParsedPage:
        """解析器出错时视为空页面，价格仍可由正则兜底"""
        try:
            return self._parser.parse_page(text, PRICE_CLASS_KEYWORD, HAS_DIGIT)
        except Exception as e:
            logger.debug(f"HTML解析失败: {type(e).__name__} - {str(e)}")
            return ParsedPage()

    @staticmethod
    def _to_text(html: Union[str, bytes, None]) -> str:
        if html is None:
            return ''
        if isinstance(html, (bytes, bytearray)):
            return bytes(html).decode('utf-8', errors='replace')
        return str(html)

    @staticmethod
    def _first(meta_tags: dict, keys: tuple) -> Optional[str]:
        for key in keys:
            value = meta_tags.get(key)
            if value and value.strip():
                return value.strip()
        return None

    @staticmethod
    def _resolve_image(image: Optional[str], base_url: Optional[str]) -> Optional[str]:
        if not image or not base_url:
            return image
        try:
            return urljoin(base_url, image)
        except ValueError:
            return image

    @staticmethod
    def _scan_price(text: str) -> Optional[str]:
        match = PRICE_PATTERN.search(text)
        if not match:
            return None
        return match.group(0).strip('"\'')
