import httpx
import pytest

from storefront import config
from storefront.errors import RemoteConfigError
from storefront.remote_config import repository as remote_config_repo
from storefront.remote_config.schemas import CheckoutSettings, parse_settings


def test_missing_section_uses_environment_defaults():
    settings = parse_settings({"banners": []})
    assert settings.free_shipping_min_total == 499.0
    assert settings.fixed_shipping_fee == 149.0
    assert settings.coupon_code == "BIENVENUE10"
    assert parse_settings(None) == settings


def test_checkout_section_overrides_defaults():
    settings = parse_settings({"checkout": {"freeShippingMinTotal": 999, "couponCode": "VERANO", "couponPercent": 15}})
    assert settings.free_shipping_min_total == 999
    assert settings.fixed_shipping_fee == 149.0
    assert settings.coupon_code == "VERANO"
    assert settings.model_dump(by_alias=True)["couponPercent"] == 15


@pytest.mark.parametrize(
    "doc",
    [
        ["pas", "un", "objet"],
        {"checkout": {"fixedShippingFee": "149"}},
        {"checkout": {"couponPercent": 150}},
    ],
)
def test_invalid_documents_raise(doc):
    with pytest.raises(RemoteConfigError):
        parse_settings(doc)


def test_version_key_changes_every_half_hour():
    assert remote_config_repo._version_key(0) == 0
    assert remote_config_repo._version_key(1799) == 0
    assert remote_config_repo._version_key(1800) == 1


def test_fetch_settings_without_url_returns_defaults():
    assert remote_config_repo.fetch_settings() == CheckoutSettings()


def test_fetch_settings_is_cached_and_busts_cdn(monkeypatch):
    monkeypatch.setattr(config, "CONFIG_JSON_URL", "https://assets.example.test/config.json")
    seen = []

    def fake_get(url, params=None, **kwargs):
        seen.append(params)
        return httpx.Response(200, json={"checkout": {"fixedShippingFee": 99}}, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx, "get", fake_get)
    assert remote_config_repo.fetch_settings().fixed_shipping_fee == 99
    assert remote_config_repo.fetch_settings().fixed_shipping_fee == 99
    assert len(seen) == 1
    assert "v" in seen[0]


def test_network_failure_falls_back_without_caching(monkeypatch):
    monkeypatch.setattr(config, "CONFIG_JSON_URL", "https://assets.example.test/config.json")
    calls = []

    def fake_get(url, **kwargs):
        calls.append(url)
        raise httpx.ConnectTimeout("timeout")

    monkeypatch.setattr(httpx, "get", fake_get)
    assert remote_config_repo.fetch_settings().fixed_shipping_fee == 149.0
    remote_config_repo.fetch_settings()
    assert len(calls) == 2
