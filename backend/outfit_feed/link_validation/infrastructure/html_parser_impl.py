# infrastructure/html_parser_impl.py
import logging
import re
from typing import Dict, Optional, Pattern
from bs4 import BeautifulSoup

from ..domain.demand_interface.i_html_parser import IHtmlParser
from ..domain.value_objects.parsed_page import ParsedPage

logger = logging.getLogger(__name__)


class HtmlParserImpl(IHtmlParser):
    """基于BeautifulSoup的HTML解析器实现，每个页面只构建一次文档树"""

    def __init__(self, parser: str = 'html.parser'):
        """
        初始化HTML解析器

        参数:
            parser: 解析器类型，可选值:
                   'html.parser' (Python内置，默认)
                   'lxml' (更快，需安装lxml)
                   'html5lib' (最宽容，需安装html5lib)
        """
        self._parser = parser

    def parse_page(
        self,
        html: str,
        class_keyword: Optional[str] = None,
        text_pattern: Optional[Pattern[str]] = None
    ) -> ParsedPage:
        if not html:
            return ParsedPage()

        try:
            soup = BeautifulSoup(html, self._parser)
        except Exception as e:
            logger.debug(f"HTML解析失败: {str(e)}")
            return ParsedPage()

        return ParsedPage(
            meta_tags=self._meta_tags(soup),
            title=self._title(soup),
            class_text=self._text_by_class(soup, class_keyword, text_pattern) if class_keyword else None
        )

    @staticmethod
    def _meta_tags(soup: BeautifulSoup) -> Dict[str, str]:
        """
        字典格式 {meta_name: content}
        包括标准meta(name)、Open Graph/商品(property)、微数据(itemprop)
        """
        meta_data = {}
        try:
            for meta in soup.find_all('meta', attrs={'content': True}):
                key = meta.get('property') or meta.get('name') or meta.get('itemprop')
                if not isinstance(key, str):
                    continue
                key = key.lower().strip()
                content = meta['content']
                if isinstance(content, list):
                    content = ' '.join(content)
                content = content.strip()
                if key and content:
                    meta_data.setdefault(key, content)
        except Exception as e:
            logger.debug(f"Meta标签提取失败: {str(e)}")
        return meta_data

    def _title(self, soup: BeautifulSoup) -> Optional[str]:
        try:
            title_tag = soup.find('title')
            if title_tag:
                return self._clean_text(title_tag.get_text()) or None
        except Exception as e:
            logger.debug(f"标题提取失败: {str(e)}")
        return None

    def _text_by_class(
        self,
        soup: BeautifulSoup,
        keyword: str,
        text_pattern: Optional[Pattern[str]]
    ) -> Optional[str]:
        """等价于 CSS 选择器 [class*="keyword"]，跳过脚本与样式；在 meta/title 之后执行，可以改动文档树"""
        keyword = keyword.lower()

        def class_matches(value) -> bool:
            # bs4 对多值 class 属性逐个调用
            return bool(value) and keyword in value.lower()

        try:
            for script in soup(['script', 'style', 'noscript']):
                script.decompose()

            for element in soup.find_all(class_=class_matches):
                text = self._clean_text(element.get_text(separator=' ', strip=True))
                if text and (text_pattern is None or text_pattern.search(text)):
                    return text
        except Exception as e:
            logger.debug(f"class文本提取失败: {str(e)}")
        return None

    @staticmethod
    def _clean_text(text: str) -> str:
        """清理多余空白"""
        return re.sub(r'\s+', ' ', text or '').strip()
