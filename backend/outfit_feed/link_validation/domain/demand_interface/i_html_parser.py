from abc import ABC, abstractmethod
from typing import Optional, Pattern

from ..value_objects.parsed_page import ParsedPage


class IHtmlParser(ABC):
    """只负责HTML结构解析，不包含业务判断；对残缺的标记不抛异常"""

    @abstractmethod
    def parse_page(
        self,
        html: str,
        class_keyword: Optional[str] = None,
        text_pattern: Optional[Pattern[str]] = None
    ) -> ParsedPage:
        """
        只解析一次，同时取出 meta 标签、<title> 和按 class 关键字匹配的元素文本

        参数:
            html: 页面文本
            class_keyword: class 中需包含的关键字（不区分大小写），None 时不查找
            text_pattern: 元素文本必须匹配的正则，不匹配的元素跳过
        """
        pass
