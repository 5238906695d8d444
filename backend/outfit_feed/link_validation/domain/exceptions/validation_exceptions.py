"""
链接校验异常类模块

这些异常只在单次校验内部用于短路流程，最终都会被转换为写回记录的 invalid 终态，
不会向调用方传播。
"""

from ..value_objects.link_status import ValidationState


class LinkValidationError(Exception):
    """
    链接校验失败基类

    Attributes:
        message: 写入 metadata.error 的人类可读原因
        state: 对应的终态
    """

    state = ValidationState.NETWORK_FAILED

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class MalformedUrlError(LinkValidationError):
    """URL 无法解析，或不是 http/https"""

    def __init__(self, url: str):
        super().__init__(f"Invalid URL: {url}")


class BlacklistedDomainError(LinkValidationError):
    """域名命中黑名单"""

    state = ValidationState.BLACKLISTED

    def __init__(self, domain: str = ""):
        self.domain = domain
        super().__init__("Domain blacklisted")


class NetworkError(LinkValidationError):
    """超时、DNS失败、重定向过多、URL非法等网络层错误"""


class HttpStatusError(NetworkError):
    """最终响应状态码不是 200"""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


class UnsupportedContentTypeError(LinkValidationError):
    """响应不是 HTML"""

    state = ValidationState.NON_HTML

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Not HTML ({content_type or 'missing content type'})")
