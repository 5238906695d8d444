"""
配置模块
- 从 backend/.env 加载环境变量（python-dotenv），再读取各项配置；
- 校验相关的参数聚合为值对象 ValidationConfig，其余为应用级配置。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from outfit_feed.link_validation.domain.value_objects.validation_config import (
    DEFAULT_BLACKLIST,
    ValidationConfig,
)

# backend/.env
backend_dir = Path(__file__).resolve().parent.parent.parent
env_path = backend_dir / '.env'

DEFAULT_DATABASE_URL = "sqlite:///outfit_feed.db"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_list(name: str) -> Optional[list]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return [item for item in value.split(',') if item.strip()]


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    sweep_interval_seconds: float = 300.0
    admin_token: Optional[str] = None
    port: int = 3001

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        从环境变量构建配置

        参数:
            load_env_file: 是否先加载 backend/.env（测试中通常关闭）
        """
        if load_env_file:
            load_dotenv(env_path)

        validation = ValidationConfig(
            blacklist=_env_list("LINK_BLACKLIST") or list(DEFAULT_BLACKLIST),
            timeout=_env_float("VALIDATION_TIMEOUT", 10.0),
            max_redirects=_env_int("VALIDATION_MAX_REDIRECTS", 5),
            max_body_bytes=_env_int("VALIDATION_MAX_BODY_BYTES", 2 * 1024 * 1024),
            max_parse_chars=_env_int("VALIDATION_MAX_PARSE_CHARS", 512 * 1024),
            user_agent=os.getenv("VALIDATION_USER_AGENT") or ValidationConfig.user_agent,
            use_head_probe=_env_bool("VALIDATION_USE_HEAD_PROBE", False),
            http_retries=_env_int("VALIDATION_HTTP_RETRIES", 0),
            concurrency=_env_int("VALIDATION_CONCURRENCY", 5),
            rate_per_second=_env_float("VALIDATION_RATE_PER_SECOND", 10.0),
            max_attempts=_env_int("VALIDATION_MAX_ATTEMPTS", 3),
        )

        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            validation=validation,
            sweep_interval_seconds=_env_float("SWEEP_INTERVAL_SECONDS", 300.0),
            admin_token=os.getenv("ADMIN_TOKEN") or None,
            port=_env_int("PORT", 3001),
        )
