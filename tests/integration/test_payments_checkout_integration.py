import stripe

from storefront import config
from storefront.catalog import repository as catalog_repo
from storefront.errors import CatalogUnavailableError


def test_checkout_returns_session_url(client, fake_stripe):
    res = client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 2}]})
    assert res.status_code == 200
    data = res.json()
    assert data["ok"] is True
    assert data["id"] == "cs_test_1"
    assert data["url"].startswith("https://checkout.stripe.test/")
    assert data["shippingCost"] == 149.0
    assert data["shippingLabel"] == "Plus que $99 pour obtenir la livraison gratuite"


def test_forged_price_is_ignored(client, fake_stripe):
    payload = {"items": [{"slug": "taza-mundial", "quantity": 1, "price": 1, "name": "Gratis"}]}
    res = client.post("/api/checkout", json=payload)
    assert res.status_code == 200
    line = fake_stripe.last_params["line_items"][0]
    assert line["price_data"]["unit_amount"] == 20000
    assert line["price_data"]["product_data"]["name"] == "Taza Mundial"


def test_session_parameters(client, fake_stripe):
    client.post("/api/checkout", json={"items": [{"slug": "playera-local", "quantity": 50}]})
    params = fake_stripe.last_params
    assert params["mode"] == "payment"
    assert params["line_items"][0]["quantity"] == 3
    assert params["shipping_address_collection"] == {"allowed_countries": ["MX"]}
    assert params["phone_number_collection"] == {"enabled": True}
    assert params["success_url"] == "https://shop.example.com/success?session_id={CHECKOUT_SESSION_ID}"
    assert params["cancel_url"] == "https://shop.example.com/cart"
    assert params["allow_promotion_codes"] is True
    assert "discounts" not in params
    assert params["metadata"]["idempotencyKey"] == params["idempotency_key"]


def test_unknown_slug_creates_no_session(client, fake_stripe):
    res = client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 1}, {"slug": "fantasma", "quantity": 1}]})
    assert res.status_code == 400
    assert res.json() == {"ok": False, "message": "Produit invalide : fantasma"}
    assert fake_stripe.calls == []


def test_empty_cart_is_rejected(client, fake_stripe):
    res = client.post("/api/checkout", json={"items": []})
    assert res.status_code == 400
    assert res.json()["ok"] is False
    assert fake_stripe.calls == []


def test_malformed_body_is_a_400(client, fake_stripe):
    res = client.post("/api/checkout", json={"items": "taza-mundial"})
    assert res.status_code == 400
    assert res.json()["ok"] is False


def test_identical_requests_reuse_the_same_session(client, fake_stripe):
    body_a = {"items": [{"slug": "taza-mundial", "quantity": 1}, {"slug": "poster-estadio", "quantity": 2}], "couponCode": "bienvenue10"}
    body_b = {"items": [{"slug": "poster-estadio", "quantity": 2}, {"slug": "taza-mundial", "quantity": 1}], "couponCode": "BIENVENUE10 "}
    first = client.post("/api/checkout", json=body_a).json()
    second = client.post("/api/checkout", json=body_b).json()
    assert first["id"] == second["id"]
    assert len(fake_stripe.by_key) == 1
    assert fake_stripe.calls[0]["idempotency_key"] == fake_stripe.calls[1]["idempotency_key"]


def test_valid_coupon_attaches_gateway_discount(client, fake_stripe):
    client.post("/api/checkout", json={"items": [{"slug": "poster-estadio", "quantity": 1}], "coupon": "bienvenue10"})
    params = fake_stripe.last_params
    assert params["discounts"] == [{"coupon": "coupon_test_10"}]
    assert "allow_promotion_codes" not in params
    assert params["metadata"]["coupon"] == "1"


def test_free_and_custom_shipping_options(client, fake_stripe):
    client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 3}]})
    rate = fake_stripe.last_params["shipping_options"][0]["shipping_rate_data"]
    assert rate["fixed_amount"]["amount"] == 0

    res = client.post("/api/checkout", json={"items": [{"slug": "vitrina-trofeo", "quantity": 1}]})
    assert res.json()["shippingLabel"] == "Contient des articles avec envoi sur devis"
    assert "shipping_options" not in fake_stripe.last_params


def test_origin_outside_allow_list_falls_back_to_site_url(client, fake_stripe):
    body = {"items": [{"slug": "poster-estadio", "quantity": 1}]}
    client.post("/api/checkout", json=body, headers={"Origin": "https://evil.example"})
    assert fake_stripe.last_params["cancel_url"] == "https://shop.example.com/cart"
    client.post("/api/checkout", json=body, headers={"Origin": "http://localhost:3000"})
    assert fake_stripe.last_params["cancel_url"] == "http://localhost:3000/cart"


def test_each_allowed_origin_gets_its_own_session(client, fake_stripe):
    body = {"items": [{"slug": "taza-mundial", "quantity": 2}]}
    shop = client.post("/api/checkout", json=body, headers={"Origin": "https://shop.example.com"})
    local = client.post("/api/checkout", json=body, headers={"Origin": "http://localhost:3000"})
    assert shop.status_code == 200 and local.status_code == 200
    assert shop.json()["id"] != local.json()["id"]
    assert fake_stripe.calls[0]["success_url"].startswith("https://shop.example.com/")
    assert fake_stripe.calls[1]["success_url"].startswith("http://localhost:3000/")


def test_missing_secret_key_is_a_server_error(client, fake_stripe, monkeypatch):
    monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "")
    res = client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 1}]})
    assert res.status_code == 500
    assert res.json()["ok"] is False
    assert fake_stripe.calls == []


def test_gateway_rejection_is_surfaced(client, fake_stripe):
    fake_stripe.error = stripe.InvalidRequestError("No such coupon: 'coupon_test_10'", "discounts")
    res = client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 1}], "couponCode": "BIENVENUE10"})
    assert res.status_code == 502
    assert res.json() == {"ok": False, "message": "No such coupon: 'coupon_test_10'"}


def test_catalog_outage_is_reported(client, fake_stripe, monkeypatch):
    def _down(force_refresh=False):
        raise CatalogUnavailableError()

    monkeypatch.setattr(catalog_repo, "get_catalog_map", _down)
    res = client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 1}]})
    assert res.status_code == 503
    assert res.json()["ok"] is False
    assert fake_stripe.calls == []


def test_checkout_responses_are_not_cached(client):
    res = client.post("/api/checkout", json={"items": [{"slug": "taza-mundial", "quantity": 1}]})
    assert "no-store" in res.headers["cache-control"]
    assert res.headers["x-frame-options"] == "DENY"


def test_rate_limit_fallback_returns_json_429(app, client, monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    app.state._rl_store = {}
    body = {"items": [{"slug": "taza-mundial", "quantity": 1}]}
    codes = [client.post("/api/checkout", json=body).status_code for _ in range(11)]
    assert codes[:10] == [200] * 10
    assert codes[10] == 429
    res = client.post("/api/checkout", json=body)
    assert res.json()["ok"] is False
    app.state._rl_store = {}
