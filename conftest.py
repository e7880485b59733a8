# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Shared fixtures: a small online-shopping profile in both formats."""

import pytest

SHOPPING_JSON = """\
{
  "$schema": "https://alps-io.github.io/schemas/alps.json",
  "alps": {
    "version": "1.0",
    "title": "ALPS Online Shopping",
    "descriptor": [
      {"id": "id", "title": "identifier", "def": "https://schema.org/identifier"},
      {"id": "name", "title": "name", "def": "https://schema.org/name"},
      {"id": "ProductList", "title": "Product List", "descriptor": [
        {"href": "#id"},
        {"href": "#name"},
        {"href": "#goCart"},
        {"href": "#goProductDetail"}
      ]},
      {"id": "ProductDetail", "title": "Product Detail", "descriptor": [
        {"href": "#id"},
        {"href": "#name"},
        {"href": "#doAddToCart"}
      ]},
      {"id": "Cart", "title": "Shopping Cart", "tag": "collection", "descriptor": [
        {"href": "#id"},
        {"href": "#goProductList"}
      ]},
      {"id": "goProductList", "type": "safe", "rt": "#ProductList"},
      {"id": "goProductDetail", "type": "safe", "rt": "#ProductDetail"},
      {"id": "goCart", "type": "safe", "rt": "#Cart"},
      {"id": "doAddToCart", "type": "unsafe", "rt": "#Cart"}
    ]
  }
}
"""

SHOPPING_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<alps version="1.0">
  <title>ALPS Online Shopping</title>
  <descriptor id="id" title="identifier" def="https://schema.org/identifier"/>
  <descriptor id="name" title="name" def="https://schema.org/name"/>
  <descriptor id="ProductList" title="Product List">
    <descriptor href="#id"/>
    <descriptor href="#name"/>
    <descriptor href="#goCart"/>
    <descriptor href="#goProductDetail"/>
  </descriptor>
  <descriptor id="ProductDetail" title="Product Detail">
    <descriptor href="#id"/>
    <descriptor href="#name"/>
    <descriptor href="#doAddToCart"/>
  </descriptor>
  <descriptor id="Cart" title="Shopping Cart" tag="collection">
    <descriptor href="#id"/>
    <descriptor href="#goProductList"/>
  </descriptor>
  <descriptor id="goProductList" type="safe" rt="#ProductList"/>
  <descriptor id="goProductDetail" type="safe" rt="#ProductDetail"/>
  <descriptor id="goCart" type="safe" rt="#Cart"/>
  <descriptor id="doAddToCart" type="unsafe" rt="#Cart"/>
</alps>
"""


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def shopping_json() -> str:
    return SHOPPING_JSON


@pytest.fixture
def shopping_xml() -> str:
    return SHOPPING_XML


@pytest.fixture
def profile_file(tmp_path, shopping_json):
    path = tmp_path / "shopping.json"
    path.write_text(shopping_json, encoding="utf-8")
    return path
