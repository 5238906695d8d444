"""
端到端校验流水线：HTTP 接口提交 → 队列 worker → requests(mock) → 解析 → 写库 → 查询
"""

import pytest
import requests
import requests_mock

from outfit_feed import create_app
from outfit_feed.shared import db_manager
from outfit_feed.shared.settings import Settings
from outfit_feed.link_validation.domain.value_objects.validation_config import ValidationConfig

PRODUCT_URL = "https://www.shop.example.com/products/red-jacket"
PRODUCT_HTML = """
<html><head>
  <title>Red Jacket - Shop</title>
  <meta property="og:title" content="Red Jacket">
  <meta property="og:image" content="/images/red-jacket.jpg">
</head>
<body><script>window.product = {"price": "$49.99"};</script></body></html>
"""


@pytest.fixture
def app():
    db_manager.Base.metadata.drop_all(bind=db_manager.engine)
    settings = Settings(
        database_url=db_manager.DATABASE_URL,
        # 内存库只有一个共享连接，worker 串行执行
        validation=ValidationConfig(concurrency=1, rate_per_second=100),
    )
    app = create_app(settings, start_workers=False)
    queue = app.extensions["link_validation"]["queue"]
    queue.start()
    yield app
    queue.stop(timeout=5)
    db_manager.db_session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


def submit_and_wait(app, client, url):
    created = client.post("/api/outfits/outfit-1/products", json={"url": url}).get_json()
    assert app.extensions["link_validation"]["queue"].join(timeout=10)
    return client.get(f"/api/links/{created['id']}").get_json()


def test_valid_product_page(app, client):
    with requests_mock.Mocker() as m:
        m.get(PRODUCT_URL, text=PRODUCT_HTML, headers={"Content-Type": "text/html; charset=utf-8"})
        link = submit_and_wait(app, client, PRODUCT_URL)

    assert link["status"] == "valid"
    assert link["isValid"] is True
    assert link["domain"] == "shop.example.com"
    assert link["metadata"]["title"] == "Red Jacket"
    assert link["metadata"]["image"] == "https://www.shop.example.com/images/red-jacket.jpg"
    assert link["metadata"]["price"] == "$49.99"
    assert "error" not in link["metadata"]


def test_http_404(app, client):
    with requests_mock.Mocker() as m:
        m.get(PRODUCT_URL, status_code=404, text="gone", headers={"Content-Type": "text/html"})
        link = submit_and_wait(app, client, PRODUCT_URL)

    assert link["status"] == "invalid"
    assert link["isValid"] is False
    assert "404" in link["metadata"]["error"]


def test_non_html(app, client):
    with requests_mock.Mocker() as m:
        m.get(PRODUCT_URL, json={"price": 1}, headers={"Content-Type": "application/json"})
        link = submit_and_wait(app, client, PRODUCT_URL)

    assert link["status"] == "invalid"
    assert link["metadata"]["error"] == "Not HTML (application/json)"


def test_timeout(app, client):
    with requests_mock.Mocker() as m:
        m.get(PRODUCT_URL, exc=requests.exceptions.ReadTimeout)
        link = submit_and_wait(app, client, PRODUCT_URL)

    assert link["status"] == "invalid"
    assert link["metadata"]["error"].startswith("Request timed out")


def test_blacklisted_domain_never_fetched(app, client):
    with requests_mock.Mocker() as m:
        link = submit_and_wait(app, client, "http://evil.scam.com/x")
        assert m.call_count == 0

    assert link["status"] == "invalid"
    assert link["metadata"]["error"] == "Domain blacklisted"
