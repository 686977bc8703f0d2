import json

import httpx
import pytest

from storefront.cart import (
    CartStore,
    CheckoutClient,
    CheckoutClientError,
    CouponPreview,
    MemoryCartStorage,
    StaleCartItemError,
    build_checkout_payload,
)

API_URL = "https://shop.example.com/api/checkout"


def _store():
    store = CartStore()
    store.add({"slug": "playera-local", "name": "Playera", "price": 1.0, "maxStock": 3})
    store.increment("playera-local")
    return store


def _client(handler):
    return CheckoutClient(API_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_payload_never_carries_prices():
    store = _store()
    coupon = CouponPreview(store, "BIENVENUE10", 10)
    coupon.apply("bienvenue10")
    body = build_checkout_payload(store, coupon)
    assert body == {"items": [{"slug": "playera-local", "quantity": 2}], "couponCode": "BIENVENUE10"}
    assert "couponCode" not in build_checkout_payload(store)


def test_create_checkout_returns_session():
    sent = {}

    def handler(request: httpx.Request):
        sent.update(json.loads(request.content))
        return httpx.Response(200, json={"ok": True, "id": "cs_test_1", "url": "https://checkout.stripe.test/c/pay/cs_test_1"})

    data = _client(handler).create_checkout(_store())
    assert data["id"] == "cs_test_1"
    assert sent["items"] == [{"slug": "playera-local", "quantity": 2}]


def test_server_rejection_is_raised_with_its_message():
    def handler(request):
        return httpx.Response(400, json={"ok": False, "message": "Produit invalide : playera-local"})

    with pytest.raises(CheckoutClientError) as exc:
        _client(handler).create_checkout(_store())
    assert exc.value.message == "Produit invalide : playera-local"
    assert exc.value.status_code == 400


def test_network_error_is_reported():
    def handler(request):
        raise httpx.ConnectError("connexion refusée", request=request)

    with pytest.raises(CheckoutClientError):
        _client(handler).create_checkout(_store())


def test_missing_url_is_an_error():
    def handler(request):
        return httpx.Response(200, json={"ok": True, "id": "cs_test_1"})

    with pytest.raises(CheckoutClientError):
        _client(handler).create_checkout(_store())


def test_stale_item_blocks_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"ok": True})

    store = CartStore(storage=MemoryCartStorage([{"name": "Gorra vieja", "price": 180, "quantity": 1}]))
    with pytest.raises(StaleCartItemError):
        _client(handler).create_checkout(store)
    assert calls == []


def test_injected_http_client_stays_open():
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    with CheckoutClient(API_URL, client=http) as checkout:
        assert checkout.client is http
    assert http.is_closed is False
    http.close()


def test_owned_http_client_is_closed_on_exit():
    with CheckoutClient(API_URL) as checkout:
        assert checkout.client.is_closed is False
    assert checkout.client.is_closed is True
