import httpx
import pytest
from httpx import ASGITransport

TEMPLATE_HTML = """<!DOCTYPE html>
<html lang="en">
<head><title>t</title></head>
<body>
<h1 data-iw-business-name>Name</h1>
<p data-iw-tagline>Tagline</p>
<a data-iw-phone href="#">phone</a>
<a data-iw-whatsapp href="#">wa</a>
<a data-iw-email href="#">email</a>
<p data-iw-address>address</p>
<section data-iw-hero-image style="min-height: 10px"></section>
<img data-iw-logo src="logo.png">
<div data-iw-services>
<div data-iw-service-item><span data-iw-service-icon>*</span><h3 data-iw-service-title>t</h3><p data-iw-service-description>d</p></div>
<div data-iw-service-item><span data-iw-service-icon>*</span><h3 data-iw-service-title>t2</h3><p data-iw-service-description>d2</p></div>
</div>
<a data-iw-facebook href="#">fb</a>
<a data-iw-instagram href="#">ig</a>
</body>
</html>"""


@pytest.fixture
def template_html():
    return TEMPLATE_HTML


@pytest.fixture
def record_data():
    return {
        "businessName": "مطعم النيل",
        "tagline": "أفضل مأكولات مصرية",
        "phone": "01012345678",
        "services": [
            {"title": "توصيل سريع", "description": "توصيل خلال 30 دقيقة"},
            {"title": "طلبات جماعية", "description": "خصومات للمجموعات"},
        ],
        "businessType": "restaurant",
    }


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "groq")
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("RATE_LIMIT_RETRY_DELAY", "0")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
