from abc import ABC, abstractmethod
from ..value_objects.http_response import HttpResponse


class IHttpClient(ABC):
    @abstractmethod
    def get(self, url: str) -> HttpResponse:
        """
        执行HTTP GET请求（跟随重定向）
        返回: HttpResponse(url, status_code, content, content_type, truncated)
        非2xx状态码作为数据返回，不抛异常
        异常: 超时、DNS失败、重定向过多、URL非法 -> NetworkError
        """
        pass

    @abstractmethod
    def head(self, url: str) -> HttpResponse:
        """
        执行HEAD请求(只获取响应头,不下载body)
        用途: 快速检查URL是否可达及其Content-Type
        """
        pass
