import math
import pytest

from storefront.cart.stock import clamp_to_stock, normalize_stock


@pytest.mark.parametrize(
    "requested, max_stock, expected",
    [
        (2, None, 2),
        (2.9, None, 2),
        ("4", 3, 3),
        (-1, 5, 0),
        (float("nan"), 5, 0),
        (float("inf"), 5, 0),
        ("abc", None, 0),
        (None, 3, 0),
        (5, 0, 0),
        (5, -2, 0),
        (5, 2.7, 2),
    ],
)
def test_clamp_to_stock_cases(requested, max_stock, expected):
    assert clamp_to_stock(requested, max_stock) == expected


def test_clamp_ignores_non_finite_stock():
    # Stock infini ou illisible: aucune limite
    assert clamp_to_stock(42, math.inf) == 42
    assert clamp_to_stock(42, "beaucoup") == 42


def test_clamp_is_idempotent():
    for q in (-3, 0, 1, 2.5, 7, "9", 1000):
        for m in (None, 0, 1, 3, 4.2, 100):
            once = clamp_to_stock(q, m)
            assert clamp_to_stock(once, m) == once
            assert isinstance(once, int) and once >= 0


def test_normalize_stock_rejects_booleans():
    assert normalize_stock(True) is None
    assert normalize_stock(None) is None
    assert normalize_stock("3") == 3
    assert normalize_stock(-4) == 0
