"""
模块职责
- 提供与前端交互的 RESTful API：提交商品链接、查询链接状态与校验日志、管理员触发扫描与统计；
- 使用 Flask Blueprint 将接口挂载在 `/api` 前缀下，健康检查单独挂在根路径。

设计说明
- 此模块属于接口层，只做输入输出转换，校验流程由 `LinkValidationService` 负责；
- 依赖在应用工厂 `create_app` 中组装后通过 `init_link_view` 注入。
"""

import hmac
import logging
from typing import Optional

from flask import Blueprint, jsonify, request

from outfit_feed.shared.event_handlers.logging_handler import LoggingEventHandler
from ..domain.entity.product_link import MAX_OUTFIT_ID_LENGTH
from ..services.link_validation_service import LinkValidationService

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)
bp = Blueprint("links", __name__, url_prefix="/api")

# 由 init_link_view 注入
_service: Optional[LinkValidationService] = None
_logging_handler: Optional[LoggingEventHandler] = None
_admin_token: Optional[str] = None


def init_link_view(
    service: LinkValidationService,
    logging_handler: Optional[LoggingEventHandler] = None,
    admin_token: Optional[str] = None
) -> None:
    """依赖注入：应用启动时传入已组装好的服务"""
    global _service, _logging_handler, _admin_token
    _service = service
    _logging_handler = logging_handler
    _admin_token = admin_token


def _get_service() -> LinkValidationService:
    if _service is None:
        raise RuntimeError("LinkValidationService not initialized")
    return _service


def _outfit_id_error(outfit_id: str):
    if len(outfit_id) > MAX_OUTFIT_ID_LENGTH:
        return jsonify({"error": f"outfit_id must be at most {MAX_OUTFIT_ID_LENGTH} characters"}), 400
    return None


@health_bp.route("/health", methods=["GET"])
def health():
    # 健康检查：用于前端快速判断后端是否正常运行
    return jsonify({"status": "ok"})

# -------------------- 商品链接 --------------------

@bp.route("/outfits/<outfit_id>/products", methods=["POST"])
def add_product(outfit_id: str):
    """为穿搭添加商品链接（pending），并投递校验任务"""
    error = _outfit_id_error(outfit_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    url = data.get("url")

    if not isinstance(url, str) or not url.strip():
        return jsonify({"error": "url is required"}), 400

    try:
        link = _get_service().submit_link(url, outfit_id)
        return jsonify(link.to_dict()), 201
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"添加商品链接失败: {str(e)}")
        return jsonify({"error": "Failed to add product link"}), 500


@bp.route("/outfits/<outfit_id>/products", methods=["GET"])
def list_products(outfit_id: str):
    """获取穿搭下的所有商品链接"""
    error = _outfit_id_error(outfit_id)
    if error:
        return error

    try:
        links = _get_service().list_links_for_outfit(outfit_id)
        return jsonify([link.to_dict() for link in links])
    except Exception as e:
        logger.error(f"查询商品链接失败: {str(e)}")
        return jsonify({"error": "Failed to list product links"}), 500


@bp.route("/links/<link_id>", methods=["GET"])
def get_link(link_id: str):
    """获取单个链接（状态与元信息）"""
    try:
        link = _get_service().get_link(link_id)
    except Exception as e:
        logger.error(f"查询链接失败: {str(e)}")
        return jsonify({"error": "Failed to get link"}), 500

    if not link:
        return jsonify({"error": "Link not found"}), 404
    return jsonify(link.to_dict())


@bp.route("/links/<link_id>/logs", methods=["GET"])
def get_link_logs(link_id: str):
    """获取链接最近的校验日志，可按 level 过滤"""
    last_n = request.args.get("last_n", type=int)
    level = request.args.get("level")
    if not _logging_handler:
        return jsonify({"link_id": link_id, "logs": [], "has_errors": False})

    return jsonify({
        "link_id": link_id,
        "logs": _logging_handler.get_logs(link_id, last_n, level),
        "has_errors": _logging_handler.has_errors(link_id),
    })

# -------------------- 管理员接口 --------------------

def _check_admin():
    """返回错误响应；校验通过时返回 None"""
    if not _admin_token:
        return jsonify({"error": "Admin not configured"}), 500

    token = request.headers.get("X-Admin-Token", "")
    if not hmac.compare_digest(token.encode(), _admin_token.encode()):
        return jsonify({"error": "Forbidden"}), 403
    return None


@bp.route("/admin/validate-now", methods=["POST"])
def validate_now():
    """立即把所有 pending 链接加入校验队列"""
    error = _check_admin()
    if error:
        return error

    try:
        queued = _get_service().sweep_pending()
        return jsonify({"success": True, "queued": queued})
    except Exception as e:
        logger.error(f"手动扫描失败: {str(e)}")
        return jsonify({"error": "Failed to queue validation"}), 500


@bp.route("/admin/stats", methods=["GET"])
def stats():
    """按状态统计链接数量"""
    try:
        return jsonify(_get_service().get_stats())
    except Exception as e:
        logger.error(f"统计失败: {str(e)}")
        return jsonify({"error": "Failed to get stats"}), 500
