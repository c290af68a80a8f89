import httpx
import pytest

from linksaver import create_app
from linksaver.config import TestConfig
from linksaver.extensions import db


def metadata_handler(request: httpx.Request) -> httpx.Response:
    target = request.url.params.get("url", "")
    if "broken" in target:
        return httpx.Response(500, json={"status": "error", "message": "boom"})
    return httpx.Response(
        200,
        json={
            "status": "success",
            "data": {
                "title": f"Title for {target}",
                "description": "A page worth keeping",
                "image": {"url": "https://img.test/cover.png"},
                "logo": {"url": "https://img.test/logo.png"},
                "publisher": None,
            },
        },
    )


@pytest.fixture
def app():
    app = create_app(TestConfig)
    app.config["METADATA_TRANSPORT"] = httpx.MockTransport(metadata_handler)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
