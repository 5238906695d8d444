"""
模块职责（应用层）
- 编排一次完整的链接校验：URL解析 → 黑名单 → 抓取 → Content-Type 检查 → 元信息抽取；
- 每次尝试只向仓储写入一次终态（valid / invalid），写完后发布领域事件；
- 提供提交链接、查询链接、pending 扫描与统计等面向接口层的方法。

设计要点
- 校验流程中的失败（黑名单、网络、非HTML）以 LinkValidationError 短路，并转换为 invalid 终态；
- 流程中的意外异常记为 FAULTED，同样写回 invalid；
- 写库失败属于基础设施错误，直接向上抛出，由任务队列按重试策略处理；
- 记录已被删除时仅记录日志并丢弃任务。
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional
from urllib.parse import urlparse

from outfit_feed.shared.event_bus import EventBus
from outfit_feed.shared.logging_config import get_performance_logger
from ..domain.demand_interface.i_http_client import IHttpClient
from ..domain.demand_interface.i_job_queue import IJobQueue
from ..domain.demand_interface.i_link_repository import ILinkRepository
from ..domain.domain_event.link_validation_event import LinkRejectedEvent, LinkValidatedEvent
from ..domain.domain_service.blacklist_filter import BlacklistFilter, normalize_domain
from ..domain.domain_service.i_metadata_extractor import IMetadataExtractor
from ..domain.entity.product_link import ProductLink, hostname_of
from ..domain.exceptions import (
    BlacklistedDomainError,
    HttpStatusError,
    LinkValidationError,
    MalformedUrlError,
    UnsupportedContentTypeError,
)
from ..domain.value_objects.http_response import HttpResponse
from ..domain.value_objects.link_status import ValidationState
from ..domain.value_objects.validation_config import ValidationConfig
from ..domain.value_objects.validation_job import VALIDATE_LINK_JOB, ValidationJob
from ..domain.value_objects.validation_outcome import ValidationOutcome
from ..infrastructure.http_client_impl import is_html_content_type

ALLOWED_SCHEMES = ('http', 'https')

logger = logging.getLogger(__name__)
perf_logger = get_performance_logger()


class LinkValidationService:
    """
    应用服务 - 商品链接校验编排
    职责：
    - 执行单个校验任务并写回终态；
    - 创建 pending 链接并投递校验任务；
    - 发布领域事件到事件总线
    """

    def __init__(
        self,
        http_client: IHttpClient,
        metadata_extractor: IMetadataExtractor,
        blacklist_filter: BlacklistFilter,
        repository: ILinkRepository,
        job_queue: IJobQueue,
        config: Optional[ValidationConfig] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        构造函数注入依赖

        参数:
            http_client: HTTP客户端
            metadata_extractor: 商品元信息抽取器
            blacklist_filter: 黑名单过滤器
            repository: 链接仓储
            job_queue: 校验任务队列
            config: 校验配置（决定是否先发 HEAD 探测）
            event_bus: 事件总线 (可选，便于测试)
            clock: 时间来源，用于 validatedAt
        """
        self._http = http_client
        self._extractor = metadata_extractor
        self._blacklist = blacklist_filter
        self._repository = repository
        self._queue = job_queue
        self._config = config or ValidationConfig()
        self._event_bus = event_bus
        self._clock = clock

# -------------------- 校验任务 --------------------

    def handle_job(self, payload: dict) -> None:
        """任务队列的处理函数"""
        try:
            job = ValidationJob.from_payload(payload)
        except ValueError as e:
            # 载荷本身有问题，重试也不会成功
            logger.error(str(e))
            return
        self.validate_link(job)

    def validate_link(self, job: ValidationJob) -> ValidationOutcome:
        """
        执行一次校验尝试并写回终态

        参数:
            job: 校验任务 {link_id, url}

        返回:
            本次尝试的结果
        """
        start_time = time.time()
        outcome = self._evaluate(job.url)

        # 唯一一次写库，失败时异常直接抛给队列
        updated = self._repository.update_link(job.link_id, outcome.to_update_fields())

        elapsed_ms = (time.time() - start_time) * 1000
        perf_logger.info(f"Validate {job.url} - {elapsed_ms:.2f}ms", extra={
            'link_id': job.link_id,
            'url': job.url,
            'state': outcome.state.value,
            'elapsed_ms': elapsed_ms,
            'component': 'LinkValidationService'
        })

        if updated is None:
            logger.warning(f"链接 {job.link_id} 不存在（可能已被删除），丢弃校验结果")
            return outcome

        self._publish_outcome(job, outcome)
        return outcome

    def _evaluate(self, url: str) -> ValidationOutcome:
        """运行校验流程，把所有流程内的失败转换为 invalid 结果"""
        try:
            domain = self._parse_domain(url)
            if self._blacklist.is_blacklisted(domain):
                raise BlacklistedDomainError(domain)

            target = url.strip()
            if self._config.use_head_probe:
                self._check_response(self._http.head(target))

            response = self._http.get(target)
            final_domain = self._check_response(response) or domain
            if response.truncated:
                # 只解析了前 max_body_bytes，商品信息可能缺失
                perf_logger.info(f"Body truncated {target} at {self._config.max_body_bytes} bytes", extra={
                    'url': target,
                    'max_body_bytes': self._config.max_body_bytes,
                    'component': 'LinkValidationService'
                })

            product = self._extractor.extract(response.content, base_url=response.url)
            return ValidationOutcome.valid(final_domain, product, self._clock())

        except LinkValidationError as e:
            return ValidationOutcome.invalid(e.state, e.message, self._clock())

        except Exception as e:
            logger.exception(f"校验 {url} 时出现意外异常")
            return ValidationOutcome.invalid(
                ValidationState.FAULTED, str(e) or type(e).__name__, self._clock()
            )

    @staticmethod
    def _parse_domain(url: str) -> str:
        """解析并规范化域名；不是 http/https 或没有主机名时抛出 MalformedUrlError"""
        try:
            parsed = urlparse(url.strip())
            hostname = parsed.hostname
        except (ValueError, AttributeError) as e:
            raise MalformedUrlError(url) from e

        if parsed.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
            raise MalformedUrlError(url)
        return normalize_domain(hostname)

    def _check_response(self, response: HttpResponse) -> str:
        """
        检查最终响应：重定向目标黑名单 → 状态码 → Content-Type

        返回:
            最终响应URL的规范化域名（无法解析时为空字符串）
        """
        final_domain = normalize_domain(hostname_of(response.url or ''))
        if final_domain and self._blacklist.is_blacklisted(final_domain):
            raise BlacklistedDomainError(final_domain)

        if response.status_code != 200:
            raise HttpStatusError(response.status_code)

        if not is_html_content_type(response.content_type):
            raise UnsupportedContentTypeError(response.content_type)

        return final_domain

    def _publish_outcome(self, job: ValidationJob, outcome: ValidationOutcome) -> None:
        if not self._event_bus:
            return

        if outcome.is_valid:
            event = LinkValidatedEvent(
                link_id=job.link_id,
                url=job.url,
                domain=outcome.domain or '',
                title=outcome.metadata.title,
                price=outcome.metadata.price
            )
        else:
            event = LinkRejectedEvent(
                link_id=job.link_id,
                url=job.url,
                reason=outcome.state.value,
                error=outcome.error or ''
            )
        self._event_bus.publish(event)

# -------------------- 提交与扫描 --------------------

    def submit_link(self, url: str, outfit_id: Optional[str] = None) -> ProductLink:
        """
        创建 pending 链接并投递校验任务

        参数:
            url: 用户提交的商品链接（不可信）
            outfit_id: 所属穿搭ID

        返回:
            新建的链接
        """
        if not url or not url.strip():
            raise ValueError("url is required")

        link = ProductLink.submit(url.strip(), outfit_id)
        self._repository.create_link(link)
        self._publish_domain_events(link)

        self._queue.enqueue(VALIDATE_LINK_JOB, ValidationJob(link.id, link.url).to_payload())
        return link

    def sweep_pending(self) -> int:
        """把所有 pending 链接重新入队，返回入队数量"""
        links = self._repository.list_pending()
        for link in links:
            self._queue.enqueue(VALIDATE_LINK_JOB, ValidationJob(link.id, link.url).to_payload())
        return len(links)

    def _publish_domain_events(self, link: ProductLink) -> None:
        """发布实体中积压的领域事件"""
        if self._event_bus:
            self._event_bus.publish_all(link.get_uncommitted_events())
        link.clear_events()

# -------------------- 查询 --------------------

    def get_link(self, link_id: str) -> Optional[ProductLink]:
        return self._repository.get_link(link_id)

    def list_links_for_outfit(self, outfit_id: str) -> List[ProductLink]:
        return self._repository.list_by_outfit(outfit_id)

    def get_stats(self) -> Dict[str, int]:
        """按状态统计链接数量"""
        return self._repository.count_by_status()
