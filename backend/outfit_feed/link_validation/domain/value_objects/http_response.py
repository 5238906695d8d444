from dataclasses import dataclass


@dataclass
class HttpResponse:
    url: str  # 跟随重定向后的最终URL
    status_code: int
    content: str = ''
    content_type: str = ''
    truncated: bool = False  # 响应体超过上限被截断
