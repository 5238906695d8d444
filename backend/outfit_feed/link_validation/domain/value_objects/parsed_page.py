from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class ParsedPage:
    """一次解析得到的页面结构信息"""
    meta_tags: Dict[str, str] = field(default_factory=dict)  # {name/property/itemprop: content}，同名取第一个
    title: Optional[str] = None       # <title> 文本
    class_text: Optional[str] = None  # 第一个 class 命中关键字且文本符合要求的元素文本
