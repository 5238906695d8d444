"""
链接接口集成测试（Flask test client + 内存 SQLite）
worker 不启动，只验证接口行为与入队结果
"""

import pytest

from outfit_feed import create_app
from outfit_feed.shared import db_manager
from outfit_feed.shared.settings import Settings
from outfit_feed.link_validation.domain.value_objects.link_status import ValidationState
from outfit_feed.link_validation.domain.value_objects.validation_job import ValidationJob


@pytest.fixture
def app():
    db_manager.Base.metadata.drop_all(bind=db_manager.engine)
    app = create_app(Settings(database_url=db_manager.DATABASE_URL, admin_token="secret"), start_workers=False)
    app.config["TESTING"] = True
    yield app
    db_manager.db_session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def queue(app):
    return app.extensions["link_validation"]["queue"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


class TestProducts:

    def test_add_product_creates_pending_link(self, client, queue):
        response = client.post("/api/outfits/outfit-1/products", json={"url": "https://www.shop.com/p/1"})

        assert response.status_code == 201
        body = response.get_json()
        assert body["status"] == "pending"
        assert body["isValid"] is False
        assert body["outfitId"] == "outfit-1"
        assert body["domain"] == "www.shop.com"
        assert body["metadata"] is None
        assert set(body) == {
            "id", "outfitId", "url", "domain", "status", "isValid", "metadata", "createdAt", "updatedAt"
        }
        assert queue.size() == 1

    @pytest.mark.parametrize("payload", [{}, {"url": ""}, {"url": "   "}, {"url": 42}])
    def test_add_product_requires_url(self, client, queue, payload):
        response = client.post("/api/outfits/outfit-1/products", json=payload)

        assert response.status_code == 400
        assert "error" in response.get_json()
        assert queue.size() == 0

    def test_list_products(self, client):
        client.post("/api/outfits/outfit-1/products", json={"url": "http://a.com/1"})
        client.post("/api/outfits/outfit-1/products", json={"url": "http://b.com/2"})
        client.post("/api/outfits/outfit-2/products", json={"url": "http://c.com/3"})

        response = client.get("/api/outfits/outfit-1/products")
        assert response.status_code == 200
        assert [l["url"] for l in response.get_json()] == ["http://a.com/1", "http://b.com/2"]

    def test_outfit_id_too_long(self, client, queue):
        outfit_id = "o" * 37

        response = client.post(f"/api/outfits/{outfit_id}/products", json={"url": "http://a.com/1"})
        assert response.status_code == 400
        assert "outfit_id" in response.get_json()["error"]
        assert queue.size() == 0

        assert client.get(f"/api/outfits/{outfit_id}/products").status_code == 400

    def test_outfit_id_at_limit_accepted(self, client):
        response = client.post(f"/api/outfits/{'o' * 36}/products", json={"url": "http://a.com/1"})
        assert response.status_code == 201


class TestLinks:

    def test_get_link(self, client):
        created = client.post("/api/outfits/o/products", json={"url": "http://a.com/1"}).get_json()

        response = client.get(f"/api/links/{created['id']}")
        assert response.status_code == 200
        assert response.get_json()["id"] == created["id"]

    def test_get_missing_link(self, client):
        response = client.get("/api/links/does-not-exist")
        assert response.status_code == 404

    def test_link_reflects_validation_result(self, app, client):
        created = client.post("/api/outfits/o/products", json={"url": "http://evil.scam.com/x"}).get_json()
        service = app.extensions["link_validation"]["service"]

        outcome = service.validate_link(ValidationJob(created["id"], created["url"]))
        assert outcome.state == ValidationState.BLACKLISTED

        body = client.get(f"/api/links/{created['id']}").get_json()
        assert body["status"] == "invalid"
        assert body["isValid"] is False
        assert body["metadata"]["error"] == "Domain blacklisted"
        assert "validatedAt" in body["metadata"]

    def test_link_logs(self, app, client):
        created = client.post("/api/outfits/o/products", json={"url": "http://evil.scam.com/x"}).get_json()
        service = app.extensions["link_validation"]["service"]
        service.validate_link(ValidationJob(created["id"], created["url"]))

        body = client.get(f"/api/links/{created['id']}/logs").get_json()
        assert body["link_id"] == created["id"]
        assert [log["event_type"] for log in body["logs"]] == ["LinkSubmittedEvent", "LinkRejectedEvent"]

        last = client.get(f"/api/links/{created['id']}/logs?last_n=1").get_json()
        assert len(last["logs"]) == 1

    def test_link_logs_level_filter(self, app, client):
        created = client.post("/api/outfits/o/products", json={"url": "http://evil.scam.com/x"}).get_json()
        service = app.extensions["link_validation"]["service"]
        service.validate_link(ValidationJob(created["id"], created["url"]))

        body = client.get(f"/api/links/{created['id']}/logs?level=warning").get_json()
        assert [log["event_type"] for log in body["logs"]] == ["LinkRejectedEvent"]
        # 黑名单是预期内的失败，不算错误
        assert body["has_errors"] is False

        body = client.get(f"/api/links/{created['id']}/logs?level=ERROR").get_json()
        assert body["logs"] == []


class TestAdmin:

    def test_validate_now_requires_token(self, client):
        response = client.post("/api/admin/validate-now", headers={"X-Admin-Token": "wrong"})
        assert response.status_code == 403

        response = client.post("/api/admin/validate-now")
        assert response.status_code == 403

    def test_validate_now_queues_pending(self, client, queue):
        client.post("/api/outfits/o/products", json={"url": "http://a.com/1"})
        client.post("/api/outfits/o/products", json={"url": "http://b.com/2"})

        response = client.post("/api/admin/validate-now", headers={"X-Admin-Token": "secret"})

        assert response.status_code == 200
        assert response.get_json() == {"success": True, "queued": 2}
        # 提交时入队 2 次，扫描又入队 2 次
        assert queue.size() == 4

    def test_validate_now_without_admin_configured(self):
        db_manager.Base.metadata.drop_all(bind=db_manager.engine)
        app = create_app(Settings(database_url=db_manager.DATABASE_URL), start_workers=False)

        response = app.test_client().post("/api/admin/validate-now", headers={"X-Admin-Token": "x"})
        assert response.status_code == 500
        assert response.get_json() == {"error": "Admin not configured"}

    def test_stats(self, app, client):
        created = client.post("/api/outfits/o/products", json={"url": "http://evil.scam.com/x"}).get_json()
        client.post("/api/outfits/o/products", json={"url": "http://a.com/1"})
        service = app.extensions["link_validation"]["service"]
        service.validate_link(ValidationJob(created["id"], created["url"]))

        response = client.get("/api/admin/stats")
        assert response.status_code == 200
        assert response.get_json() == {"pending": 1, "valid": 0, "invalid": 1}


def test_sweeper_releases_thread_session(app):
    sweeper = app.extensions["link_validation"]["sweeper"]
    assert sweeper._after_sweep == db_manager.db_session.remove
