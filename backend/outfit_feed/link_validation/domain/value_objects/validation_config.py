from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlparse

DEFAULT_BLACKLIST = (
    "scam.com",
    "phishing",
    "malware",
    "fake-store",
    "bit.ly",
    "tinyurl.com",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


@dataclass
class ValidationConfig:
    blacklist: List[str] = field(default_factory=lambda: list(DEFAULT_BLACKLIST))
    timeout: float = 10.0          # 连接+读取超时（秒）
    max_redirects: int = 5
    max_body_bytes: int = 2 * 1024 * 1024  # 最多读取的响应体字节数
    max_parse_chars: int = 512 * 1024      # 交给 HTML 解析器的最大字符数
    user_agent: str = DEFAULT_USER_AGENT
    use_head_probe: bool = False   # True: 先 HEAD 再 GET；False: 单次 GET
    http_retries: int = 0
    concurrency: int = 5           # 并发校验数
    rate_per_second: float = 10.0  # 每秒最多启动的校验数
    max_attempts: int = 3          # 基础设施故障时的最大投递次数

    def __post_init__(self):
        """
        数据清洗与验证
        """
        cleaned = []
        for entry in self.blacklist or []:
            if not entry:
                continue
            entry = entry.strip().lower()

            # 如果包含协议，解析出域名
            if '://' in entry:
                parsed = urlparse(entry)
                entry = parsed.netloc or entry
            # 如果不包含协议但包含路径分隔符，截取前面部分
            elif '/' in entry:
                entry = entry.split('/')[0]

            if entry and entry not in cleaned:
                cleaned.append(entry)
        self.blacklist = cleaned

        if self.concurrency < 1:
            raise ValueError("concurrency 必须 >= 1")
        if self.rate_per_second <= 0:
            raise ValueError("rate_per_second 必须 > 0")
        if self.max_parse_chars < 1:
            raise ValueError("max_parse_chars 必须 >= 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts 必须 >= 1")
