from typing import Optional

from flask import Flask
from flask_cors import CORS

from .shared import db_manager
from .shared.db_manager import db_session
from .shared.event_bus import EventBus
from .shared.event_handlers.logging_handler import LoggingEventHandler
from .shared.settings import Settings
from .link_validation.domain.domain_service.blacklist_filter import BlacklistFilter
from .link_validation.domain.value_objects.validation_job import VALIDATE_LINK_JOB
from .link_validation.infrastructure.database.link_repository_impl import LinkRepositoryImpl
from .link_validation.infrastructure.database.sqlalchemy_link_dao_impl import SqlAlchemyLinkDaoImpl
from .link_validation.infrastructure.html_parser_impl import HtmlParserImpl
from .link_validation.infrastructure.http_client_impl import HttpClientImpl
from .link_validation.infrastructure.metadata_extractor_impl import MetadataExtractorImpl
from .link_validation.infrastructure.pending_link_sweeper import PendingLinkSweeper
from .link_validation.infrastructure.rate_limiter import TokenBucketRateLimiter
from .link_validation.infrastructure.validation_queue_impl import ValidationQueueImpl
from .link_validation.services.link_validation_service import LinkValidationService
from .link_validation.view.link_view import bp as links_bp, health_bp, init_link_view


def create_app(settings: Optional[Settings] = None, start_workers: bool = True):
    """
    应用工厂（组合根）：组装校验流水线的所有依赖并注册蓝图

    参数:
        settings: 配置，None 时从环境变量读取
        start_workers: 是否启动校验 worker 与定时扫描（测试中通常关闭）
    """
    settings = settings or Settings.from_env()
    config = settings.validation

    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    if settings.database_url != db_manager.DATABASE_URL:
        db_manager.configure_engine(settings.database_url)
    db_manager.init_db()

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        db_session.remove()

    # 事件总线 + 业务日志
    event_bus = EventBus()
    logging_handler = LoggingEventHandler()
    event_bus.subscribe_to_all(logging_handler.handle)

    # 任务队列：每个任务结束后释放 worker 线程的数据库会话
    job_queue = ValidationQueueImpl(
        concurrency=config.concurrency,
        rate_limiter=TokenBucketRateLimiter(config.rate_per_second),
        max_attempts=config.max_attempts,
        after_job=db_session.remove
    )

    http_client = HttpClientImpl(
        user_agent=config.user_agent,
        timeout=config.timeout,
        max_redirects=config.max_redirects,
        max_body_bytes=config.max_body_bytes,
        max_retries=config.http_retries
    )

    service = LinkValidationService(
        http_client=http_client,
        metadata_extractor=MetadataExtractorImpl(HtmlParserImpl(), max_parse_chars=config.max_parse_chars),
        blacklist_filter=BlacklistFilter(config.blacklist),
        repository=LinkRepositoryImpl(SqlAlchemyLinkDaoImpl()),
        job_queue=job_queue,
        config=config,
        event_bus=event_bus
    )
    job_queue.register(VALIDATE_LINK_JOB, service.handle_job)

    sweeper = PendingLinkSweeper(
        service.sweep_pending,
        interval=settings.sweep_interval_seconds,
        after_sweep=db_session.remove
    )

    init_link_view(service, logging_handler, settings.admin_token)
    app.register_blueprint(health_bp)
    app.register_blueprint(links_bp)

    app.extensions["link_validation"] = {
        "settings": settings,
        "service": service,
        "queue": job_queue,
        "sweeper": sweeper,
        "event_bus": event_bus,
        "logging_handler": logging_handler,
    }

    if start_workers:
        job_queue.start()
        sweeper.start()

    return app
