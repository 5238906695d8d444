import time
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Optional
from ..domain.demand_interface.i_http_client import IHttpClient
from ..domain.value_objects.http_response import HttpResponse
from ..domain.exceptions import NetworkError

HTML_CONTENT_TYPES = ('text/html', 'application/xhtml+xml')


def is_html_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return any(t in content_type.lower() for t in HTML_CONTENT_TYPES)


class HttpClientImpl(IHttpClient):
    """基于requests库的HTTP客户端实现"""

    def __init__(
        self,
        user_agent: str = "Mozilla/5.0 (compatible; OutfitLinkValidator/1.0)",
        timeout: float = 10,
        max_redirects: int = 5,
        max_body_bytes: int = 2 * 1024 * 1024,
        max_retries: int = 0,
        retry_backoff: float = 0.3
    ):
        """
        初始化HTTP客户端

        参数:
            user_agent: User-Agent标识（很多商城会拒绝库默认的UA）
            timeout: 连接+读取超时时间(秒)
            max_redirects: 最多跟随的重定向次数
            max_body_bytes: 响应体最多读取的字节数，超出部分丢弃
            max_retries: 传输层重试次数（默认不重试）
            retry_backoff: 重试间隔倍数
        """
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._max_body_bytes = max_body_bytes
        self._session = requests.Session()
        self._session.max_redirects = max_redirects

        # 设置请求头
        self._session.headers.update({
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive'
        })

        # 配置重试策略
        retry_strategy = Retry(
            total=max_retries,
            connect=max_retries,
            read=max_retries,
            backoff_factor=retry_backoff,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def get(self, url: str) -> HttpResponse:
        """
        执行HTTP GET请求

        仅当响应是HTML时才读取响应体，且最多读取 max_body_bytes 字节
        """
        response = self._send('GET', url, stream=True)
        try:
            content = ''
            truncated = False
            if response.status_code == 200 and is_html_content_type(response.headers.get('Content-Type')):
                content, truncated = self._read_body(response)
            return self._to_http_response(response, content, truncated)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Failed to read response body: {str(e)}") from e
        finally:
            response.close()

    def head(self, url: str) -> HttpResponse:
        """
        执行HEAD请求(只获取响应头)

        返回:
            HttpResponse对象(content为空字符串)
        """
        response = self._send('HEAD', url)
        try:
            return self._to_http_response(response, '', False)
        finally:
            response.close()

    def _send(self, method: str, url: str, stream: bool = False) -> requests.Response:
        """发送请求，并把 requests 的各种异常统一转换为 NetworkError"""
        try:
            return self._session.request(
                method,
                url,
                timeout=self._timeout,
                allow_redirects=True,  # 自动跟随重定向
                stream=stream
            )

        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Request timed out after {self._timeout:g}s") from e

        except requests.exceptions.TooManyRedirects as e:
            raise NetworkError(f"Too many redirects (max {self._max_redirects})") from e

        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Connection failed: {str(e)}") from e

        except (requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema,
                requests.exceptions.InvalidURL) as e:
            raise NetworkError(f"Invalid URL: {str(e)}") from e

        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request failed: {str(e)}") from e

    def _read_body(self, response: requests.Response) -> tuple[str, bool]:
        """按块读取响应体直到上限，返回 (文本, 是否截断)"""
        # requests 的 timeout 只约束单次 socket 操作，这里再加一个整体读取时限
        deadline = time.monotonic() + self._timeout
        chunks = []
        received = 0
        truncated = False
        for chunk in response.iter_content(chunk_size=16 * 1024):
            if not chunk:
                continue
            remaining = self._max_body_bytes - received
            if len(chunk) > remaining:
                chunks.append(chunk[:remaining])
                truncated = True
                break
            chunks.append(chunk)
            received += len(chunk)
            if time.monotonic() > deadline:
                raise NetworkError(f"Request timed out after {self._timeout:g}s")

        raw = b''.join(chunks)

        # 如果 header 里没写编码，requests 默认是 ISO-8859-1，这里改用 utf-8 兜底
        encoding = response.encoding
        if not encoding or encoding.upper() == 'ISO-8859-1':
            encoding = 'utf-8'
        try:
            return raw.decode(encoding, errors='replace'), truncated
        except LookupError:
            return raw.decode('utf-8', errors='replace'), truncated

    def _to_http_response(self, response: requests.Response, content: str, truncated: bool) -> HttpResponse:
        return HttpResponse(
            url=response.url,
            status_code=response.status_code,
            content=content,
            content_type=response.headers.get('Content-Type', ''),
            truncated=truncated
        )

    def close(self):
        """关闭会话，释放连接"""
        self._session.close()

    def __enter__(self):
        """支持上下文管理器"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """退出时自动关闭会话"""
        self.close()
