from enum import Enum


class LinkStatus(Enum):
    PENDING = "pending"
    VALID = "valid"
    INVALID = "invalid"


class ValidationState(Enum):
    """单次校验尝试的终态"""
    BLACKLISTED = "blacklisted"
    NETWORK_FAILED = "network_failed"
    NON_HTML = "non_html"
    VALID = "valid"
    FAULTED = "faulted"  # 步骤1-5中出现的意外异常，按失败写回
