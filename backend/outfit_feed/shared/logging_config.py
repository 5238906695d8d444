"""
日志配置模块
三类日志各占一个子目录，均为 JSON 行格式、按天切分：
- link_validation/  链接校验业务日志，由 LoggingEventHandler 写入
- error/            worker、sweeper 的技术错误
- performance/      每次校验的耗时

文件名带日期前缀，例如 2025-11-30_link_validation.log
"""

import logging
import logging.config
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, Optional


class LogCategory(NamedTuple):
    logger_name: str
    log_type: str       # 子目录名，同时是文件名后缀
    level: str
    backup_days: int
    to_console: bool


LOG_CATEGORIES = (
    LogCategory('domain.link_validation', 'link_validation', 'INFO', 30, True),
    LogCategory('infrastructure.error', 'error', 'ERROR', 30, True),
    LogCategory('infrastructure.perf', 'performance', 'INFO', 7, False),
)

LOGGER_NAMES = [c.logger_name for c in LOG_CATEGORIES]

DEFAULT_LOG_ROOT = Path(__file__).resolve().parent.parent.parent / 'logs'


def _build_config(log_root_dir: Path, console_level: str) -> dict:
    today = datetime.now().strftime('%Y-%m-%d')
    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
            'level': console_level,
        }
    }
    loggers = {}

    for category in LOG_CATEGORIES:
        handler_name = f'{category.log_type}_file'
        handlers[handler_name] = {
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'filename': str(log_root_dir / category.log_type / f'{today}_{category.log_type}.log'),
            'when': 'MIDNIGHT',
            'interval': 1,
            'backupCount': category.backup_days,
            'encoding': 'utf-8',
            'formatter': 'json',
        }
        loggers[category.logger_name] = {
            'handlers': [handler_name, 'console'] if category.to_console else [handler_name],
            'level': category.level,
            'propagate': False,
        }

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {
                '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s',
                'timestamp': True,
            },
            'simple': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': handlers,
        'loggers': loggers,
        # 未归类的 logger（flask、sqlalchemy、各模块 __name__）只输出到控制台
        'root': {'level': 'INFO', 'handlers': ['console']},
    }


def setup_logging(log_root_dir: Optional[Path] = None, console_level: str = 'INFO') -> None:
    """
    初始化全部日志，启动时调用一次

    参数:
        log_root_dir: 日志根目录，默认 backend/logs
        console_level: 控制台输出级别
    """
    log_root_dir = Path(log_root_dir) if log_root_dir else DEFAULT_LOG_ROOT
    for category in LOG_CATEGORIES:
        (log_root_dir / category.log_type).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(_build_config(log_root_dir, console_level))

    # dictConfig 无法配置 namer，只能事后挂上
    for name in LOGGER_NAMES:
        for handler in logging.getLogger(name).handlers:
            if isinstance(handler, logging.handlers.TimedRotatingFileHandler):
                handler.namer = custom_namer

    get_link_validation_logger().info("日志系统初始化完成", extra={'log_root_dir': str(log_root_dir)})


def custom_namer(default_name: str) -> str:
    """
    轮转后的文件名改为日期前缀：
    2025-11-30_error.log.2025-11-29 -> 2025-11-29_error.log
    """
    path = Path(default_name)
    stem, sep, rotated_date = path.name.partition('.log.')
    if not sep or '_' not in stem:
        return default_name
    log_type = stem.split('_', 1)[1]
    return str(path.parent / f"{rotated_date}_{log_type}.log")


def get_link_validation_logger() -> logging.Logger:
    return logging.getLogger('domain.link_validation')


def get_error_logger() -> logging.Logger:
    return logging.getLogger('infrastructure.error')


def get_performance_logger() -> logging.Logger:
    return logging.getLogger('infrastructure.perf')
