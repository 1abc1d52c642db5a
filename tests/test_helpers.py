"""Listing parameter parsing and money formatting."""

from __future__ import annotations

from decimal import Decimal

import pytest

from marketplace_api.core.errors import ApiError
from marketplace_api.repositories.base import SearchTerm, SortTerm
from marketplace_api.services.base import parse_search, parse_sort
from marketplace_api.services.marketplace import PRODUCT_LIST_FIELDS, format_money, parse_price
from marketplace_api.services.users import USER_LIST_FIELDS


def test_parse_search() -> None:
    assert parse_search(None, USER_LIST_FIELDS) is None
    assert parse_search("name:ali", USER_LIST_FIELDS) == SearchTerm(field="name", key="ali")
    # Only the first colon separates field and key.
    assert parse_search("email:a:b", USER_LIST_FIELDS) == SearchTerm(field="email", key="a:b")
    assert parse_search("country:", PRODUCT_LIST_FIELDS) == SearchTerm(field="country", key="")


def test_parse_search_rejects_unknown_field() -> None:
    with pytest.raises(ApiError) as info:
        parse_search("hashed_password:x", USER_LIST_FIELDS)
    assert info.value.status_code == 422
    assert info.value.message == "invalid search field"


def test_parse_sort() -> None:
    assert parse_sort(None, PRODUCT_LIST_FIELDS) is None
    assert parse_sort("price:asc", PRODUCT_LIST_FIELDS) == SortTerm(field="price", descending=False)
    assert parse_sort("quantity:desc", PRODUCT_LIST_FIELDS) == SortTerm(field="quantity", descending=True)


@pytest.mark.parametrize(
    "sort, message",
    [("created_at:asc", "invalid sort field"), ("price:DESC", "invalid sort key"), ("price:", "invalid sort key")],
)
def test_parse_sort_rejections(sort: str, message: str) -> None:
    with pytest.raises(ApiError) as info:
        parse_sort(sort, PRODUCT_LIST_FIELDS)
    assert info.value.message == message


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("1000"), "$1000"),
        (Decimal("12.50"), "$12.5"),
        (Decimal("0.00"), "$0"),
        (Decimal("1E+3"), "$1000"),
    ],
)
def test_format_money(amount: Decimal, expected: str) -> None:
    assert format_money(amount) == expected


def test_parse_price() -> None:
    assert parse_price("$1000") == Decimal("1000")
    assert parse_price("$12.5") == Decimal("12.5")
    with pytest.raises(ValueError):
        parse_price("$lots")
