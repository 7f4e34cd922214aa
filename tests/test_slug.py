"""Tests for the slug generator."""
import re

import pytest

from app.utils.slug import slugify

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Toyota Avanza", "toyota-avanza"),
        ("  Toyota  Avanza 1.5 G!! ", "toyota-avanza-15-g"),
        ("Kaos -- Polos", "kaos-polos"),
        ("snake_case_name", "snake-case-name"),
        ("UPPER lower", "upper-lower"),
        ("Tab\tand\nnewline", "tab-and-newline"),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


@pytest.mark.parametrize("name", ["", "   ", "!!!", "---", "@#$%"])
def test_slugify_empty_result(name):
    assert slugify(name) == ""


@pytest.mark.parametrize(
    "name",
    ["Hello, World!", "-leading and trailing-", "Café Latte", "a  -  b", "100% Cotton"],
)
def test_slugify_output_shape(name):
    slug = slugify(name)
    assert SLUG_PATTERN.match(slug)


def test_slugify_is_idempotent():
    slug = slugify("Samsung Galaxy S24 Ultra (512GB)")
    assert slugify(slug) == slug
