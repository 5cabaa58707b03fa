"""Shared fakes for the Playwright boundary."""
from __future__ import annotations

import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browser import BrowserManager
from storefront import (
    GET_CART_JS, ADD_PRODUCT_JS, REMOVE_PRODUCT_JS, CLEAR_CART_JS, OPEN_CHECKOUT_JS,
    StorefrontBridge,
)


class FakeEcwid:
    """In-memory stand-in for window.Ecwid on one storefront page."""

    def __init__(self, items=None, cart_id="cart-1"):
        self.items = [dict(item) for item in (items or [])]
        self.cart_id = cart_id
        self.calls = []

    def snapshot(self):
        return {
            "cartId": self.cart_id,
            "items": [dict(item) for item in self.items],
            "productsQuantity": sum(item.get("quantity", 0) for item in self.items),
        }

    def get(self, _arg=None):
        self.calls.append("get")
        return self.snapshot()

    def add_product(self, product):
        self.calls.append("addProduct")
        self.items.append({"product": {"id": product["id"]}, "quantity": product["quantity"],
                           "options": product["options"]})
        return {
            "success": True,
            "addedProduct": {"id": product["id"], "quantity": product["quantity"]},
            "updatedCart": self.snapshot(),
        }

    def remove_product(self, index):
        self.calls.append("removeProduct")
        del self.items[index]
        return True

    def clear(self, _arg=None):
        self.calls.append("clear")
        self.items = []
        return True

    def open_checkout(self, _arg=None):
        self.calls.append("openCheckout")
        return True


class FakePage:
    def __init__(self, ecwid: FakeEcwid, widget_appears=True, evaluate_error=None):
        self.ecwid = ecwid
        self.widget_appears = widget_appears
        self.evaluate_error = evaluate_error
        self.visited = []
        self.listeners = []
        self.close_count = 0
        self._scripts = {
            GET_CART_JS: ecwid.get,
            ADD_PRODUCT_JS: ecwid.add_product,
            REMOVE_PRODUCT_JS: ecwid.remove_product,
            CLEAR_CART_JS: ecwid.clear,
            OPEN_CHECKOUT_JS: ecwid.open_checkout,
        }

    def on(self, event, handler):
        self.listeners.append((event, handler))

    async def goto(self, url, **kwargs):
        self.visited.append(url)

    async def wait_for_function(self, expression, timeout=None):
        await asyncio.sleep(0)
        if not self.widget_appears:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def evaluate(self, expression, arg=None):
        await asyncio.sleep(0)
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return self._scripts[expression](arg)

    async def close(self):
        self.close_count += 1


class FakeBrowser:
    def __init__(self, pages=None):
        self.pages = list(pages or [])
        self.opened = []
        self.connected = True
        self.close_count = 0

    def is_connected(self):
        return self.connected

    async def new_page(self, **kwargs):
        page = self.pages.pop(0) if self.pages else FakePage(FakeEcwid())
        self.opened.append(page)
        return page

    async def close(self):
        self.connected = False
        self.close_count += 1


@pytest.fixture
def make_bridge():
    """Build a bridge whose shared browser hands out the given pages."""

    def _make(*pages):
        fake_browser = FakeBrowser(pages)
        manager = BrowserManager(reuse=True, launch_options={}, page_options={})
        manager.browser = fake_browser
        bridge = StorefrontBridge(manager, storefront_url="https://store.test/", widget_timeout_ms=50)
        return bridge, fake_browser

    return _make
