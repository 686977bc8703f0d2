import os

# Pas de Redis pendant les tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
import stripe
from typing import Any, Dict, Generator, List, Optional
from fastapi.testclient import TestClient

from storefront import config
from storefront.app import app as fastapi_app
from storefront.catalog import repository as catalog_repo
from storefront.catalog.schemas import CatalogItem
from storefront.remote_config import repository as remote_config_repo

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

# Configuration déterministe (indépendante du .env local)
@pytest.fixture(autouse=True)
def _test_config(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(config, "STRIPE_WEBHOOK_SECRET", "whsec_test")
    monkeypatch.setattr(config, "STRIPE_COUPON_ID", "coupon_test_10")
    monkeypatch.setattr(config, "COUPON_CODE", "BIENVENUE10")
    monkeypatch.setattr(config, "COUPON_PERCENT", 10.0)
    monkeypatch.setattr(config, "FREE_SHIPPING_MIN_TOTAL", 499.0)
    monkeypatch.setattr(config, "FIXED_SHIPPING_FEE", 149.0)
    monkeypatch.setattr(config, "CHECKOUT_CURRENCY", "mxn")
    monkeypatch.setattr(config, "SHIPPING_COUNTRIES", ["MX"])
    monkeypatch.setattr(config, "DEFAULT_MAX_QTY", 10)
    monkeypatch.setattr(config, "SITE_URL", "https://shop.example.com")
    monkeypatch.setattr(config, "ALLOWED_ORIGINS", ["https://shop.example.com", "http://localhost:3000"])
    monkeypatch.setattr(config, "CHECKOUT_SUCCESS_PATH", "/success")
    monkeypatch.setattr(config, "CHECKOUT_CANCEL_PATH", "/cart")
    monkeypatch.setattr(config, "PRODUCTS_JSON_URL", "https://assets.example.test/products.json")
    monkeypatch.setattr(config, "CONFIG_JSON_URL", "")
    catalog_repo.invalidate_cache()
    remote_config_repo.invalidate_cache()
    yield
    catalog_repo.invalidate_cache()
    remote_config_repo.invalidate_cache()

CATALOG_RECORDS: List[Dict[str, Any]] = [
    {"slug": "taza-mundial", "name": "Taza Mundial", "image": "/img/taza.png", "fullPrice": 250, "discountPrice": 200, "freeShipping": True, "maxQty": 5},
    {"slug": "playera-local", "name": "Playera Local", "image": "https://cdn.example.test/playera.png", "fullPrice": 350, "freeShipping": True, "maxQty": 3},
    {"slug": "poster-estadio", "name": "Poster Estadio", "fullPrice": 120, "freeShipping": False},
    {"slug": "vitrina-trofeo", "name": "Vitrina Trofeo", "fullPrice": 5000, "shippingType": "custom", "maxQty": 2},
    {"slug": "gorra-agotada", "name": "Gorra Agotada", "fullPrice": 180, "maxQty": 0},
]

@pytest.fixture
def catalog_records() -> List[Dict[str, Any]]:
    return [dict(r) for r in CATALOG_RECORDS]

@pytest.fixture
def catalog(monkeypatch, catalog_records) -> Dict[str, CatalogItem]:
    """Catalogue en mémoire à la place du JSON distant."""
    items = {r["slug"]: CatalogItem.model_validate(r) for r in catalog_records}
    monkeypatch.setattr(catalog_repo, "get_catalog_map", lambda force_refresh=False: items)
    return items


class FakeCheckoutSessions:
    """Passerelle simulée: une même clé d'idempotence renvoie la même session."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.by_key: Dict[str, Dict[str, Any]] = {}
        self.params_by_key: Dict[str, Dict[str, Any]] = {}
        self.error: Optional[Exception] = None
        self.retrieved: Dict[str, Dict[str, Any]] = {}

    def create(self, idempotency_key=None, **params):
        self.calls.append({"idempotency_key": idempotency_key, **params})
        if self.error is not None:
            raise self.error
        if idempotency_key and idempotency_key in self.by_key:
            # Comme Stripe: une clé réutilisée doit porter exactement les mêmes paramètres
            if self.params_by_key[idempotency_key] != params:
                raise stripe.IdempotencyError(
                    "Keys for idempotent requests can only be used with the same parameters they were first used with."
                )
            return self.by_key[idempotency_key]
        n = len(self.calls)
        session = {"id": f"cs_test_{n}", "url": f"https://checkout.stripe.test/c/pay/cs_test_{n}"}
        if idempotency_key:
            self.by_key[idempotency_key] = session
            self.params_by_key[idempotency_key] = params
        return session

    def retrieve(self, session_id, expand=None):
        if session_id not in self.retrieved:
            raise stripe.InvalidRequestError(f"No such checkout.session: '{session_id}'", "id")
        return self.retrieved[session_id]

    @property
    def last_params(self) -> Dict[str, Any]:
        return self.calls[-1]


@pytest.fixture
def fake_stripe(monkeypatch) -> FakeCheckoutSessions:
    fake = FakeCheckoutSessions()
    monkeypatch.setattr(stripe.checkout.Session, "create", staticmethod(fake.create))
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", staticmethod(fake.retrieve))
    return fake

@pytest.fixture()
def client(app, catalog, fake_stripe) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
