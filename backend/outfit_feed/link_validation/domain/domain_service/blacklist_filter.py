from typing import Iterable


def normalize_domain(domain: str) -> str:
    """小写、去空白、去末尾点号、去掉前导 www."""
    if not domain:
        return ''
    domain = domain.strip().lower().rstrip('.')
    if domain.startswith('www.'):
        domain = domain[4:]
    return domain


class BlacklistFilter:
    """
    域名黑名单过滤 - 纯逻辑，无副作用，不抛异常
    规则：规范化后的域名只要包含任一黑名单条目（子串匹配）即视为屏蔽，
    这样子域名也能被拦住。
    """

    def __init__(self, entries: Iterable[str]):
        normalized = (normalize_domain(e) for e in entries if e)
        self._entries = tuple(e for e in normalized if e)

    @property
    def entries(self) -> tuple:
        return self._entries

    def is_blacklisted(self, domain: str) -> bool:
        normalized = normalize_domain(domain)
        if not normalized:
            return False
        return any(entry in normalized for entry in self._entries)
