"""Bridge between API actions and the Ecwid widget running in a storefront page."""
import logging
from typing import Any, Callable, Dict, Awaitable
from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from browser import BrowserManager
from config import STOREFRONT_URL, WIDGET_TIMEOUT_MS, NAVIGATION_TIMEOUT_MS
from errors import StorefrontError, WidgetNotReadyError, WidgetRejectedError, ScriptExecutionError
from models import (
    Cart, ActionResult, AddProductAction, GetCartAction, RemoveProductAction,
    ClearCartAction, CheckoutAction, AddProductResult, RemoveProductResult,
    ClearCartResult, CheckoutResult
)

logger = logging.getLogger(__name__)

# In-page scripts. Each one turns a callback-style Ecwid call into a promise.
WIDGET_READY_JS = "() => Boolean(window.Ecwid && window.Ecwid.Cart)"

GET_CART_JS = """() => new Promise((resolve) => {
    Ecwid.Cart.get((cart) => resolve(cart));
})"""

ADD_PRODUCT_JS = """(product) => new Promise((resolve) => {
    Ecwid.Cart.addProduct({
        id: Number(product.id),
        quantity: Number(product.quantity),
        options: product.options || {},
        callback: (success, addedProduct, cart) => {
            resolve({ success: success, addedProduct: addedProduct, updatedCart: cart });
        }
    });
})"""

REMOVE_PRODUCT_JS = """(index) => new Promise((resolve) => {
    Ecwid.Cart.removeProduct(index, () => resolve(true));
})"""

CLEAR_CART_JS = """() => new Promise((resolve) => {
    Ecwid.Cart.clear(() => resolve(true));
})"""

OPEN_CHECKOUT_JS = """() => {
    Ecwid.Checkout.open();
    return true;
}"""


class StorefrontWidget:
    """Async view of the ``window.Ecwid`` object inside one page."""

    def __init__(self, page: Page):
        self.page = page

    async def wait_until_ready(self, timeout_ms: int = WIDGET_TIMEOUT_MS):
        try:
            await self.page.wait_for_function(WIDGET_READY_JS, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WidgetNotReadyError("Ecwid API not loaded") from e
        logger.info("Ecwid API detected")

    async def get_cart(self) -> Cart:
        return await self.page.evaluate(GET_CART_JS)

    async def add_product(self, product_id: int, quantity: int, options: Dict[str, Any]) -> AddProductResult:
        payload = await self.page.evaluate(
            ADD_PRODUCT_JS, {"id": product_id, "quantity": quantity, "options": options}
        )
        return AddProductResult.model_validate(payload)

    async def remove_product(self, index: int):
        await self.page.evaluate(REMOVE_PRODUCT_JS, index)

    async def clear(self):
        await self.page.evaluate(CLEAR_CART_JS)

    async def open_checkout(self):
        await self.page.evaluate(OPEN_CHECKOUT_JS)


class StorefrontBridge:
    """Runs cart actions against the storefront, one page per call."""

    def __init__(
        self,
        browser_manager: BrowserManager,
        storefront_url: str = STOREFRONT_URL,
        widget_timeout_ms: int = WIDGET_TIMEOUT_MS,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
    ):
        self.browser = browser_manager
        self.storefront_url = storefront_url
        self.widget_timeout_ms = widget_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self._handlers: Dict[type, Callable[[StorefrontWidget, Any], Awaitable[ActionResult]]] = {
            GetCartAction: self._get_cart,
            AddProductAction: self._add_product,
            RemoveProductAction: self._remove_product,
            ClearCartAction: self._clear_cart,
            CheckoutAction: self._checkout,
        }

    @property
    def is_ready(self) -> bool:
        return self.browser.is_ready

    async def run_action(self, action) -> ActionResult:
        """
        Execute one action inside a fresh storefront page.

        The page is always closed before this returns or raises.

        Args:
            action: One of the StorefrontAction variants

        Returns:
            The cart snapshot for getCart, otherwise the action's result model

        Raises:
            StorefrontError: launch, widget-ready, rejection or execution failure
        """
        logger.info(f"Received action: {action!r}")
        handler = self._handlers.get(type(action))
        if handler is None:
            raise WidgetRejectedError("Invalid action")

        try:
            async with self.browser.new_page() as page:
                page.on("console", _log_console_message)
                widget = await self._open_storefront(page)
                result = await handler(widget, action)
        except StorefrontError as e:
            logger.warning(f"Storefront action {action.action} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Storefront execution error: {e}", exc_info=True)
            raise ScriptExecutionError("Failed to execute script.") from e

        logger.info(f"Action {action.action} executed successfully")
        return result

    async def _open_storefront(self, page: Page) -> StorefrontWidget:
        try:
            await page.goto(self.storefront_url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WidgetNotReadyError(f"Timed out loading {self.storefront_url}") from e
        logger.info(f"Navigated to {self.storefront_url}")

        widget = StorefrontWidget(page)
        await widget.wait_until_ready(self.widget_timeout_ms)
        return widget

    async def _get_cart(self, widget: StorefrontWidget, action: GetCartAction) -> Cart:
        return await widget.get_cart()

    async def _add_product(self, widget: StorefrontWidget, action: AddProductAction) -> AddProductResult:
        return await widget.add_product(action.id, action.quantity, action.options)

    async def _remove_product(self, widget: StorefrontWidget, action: RemoveProductAction) -> RemoveProductResult:
        await widget.remove_product(action.index)
        updated_cart = await widget.get_cart()
        return RemoveProductResult(updated_cart=updated_cart)

    async def _clear_cart(self, widget: StorefrontWidget, action: ClearCartAction) -> ClearCartResult:
        await widget.clear()
        return ClearCartResult()

    async def _checkout(self, widget: StorefrontWidget, action: CheckoutAction) -> CheckoutResult:
        cart = await widget.get_cart()
        if not (cart or {}).get("items"):
            raise WidgetRejectedError("Cart is empty")
        await widget.open_checkout()
        return CheckoutResult()

    async def close(self):
        await self.browser.close()


def _log_console_message(msg):
    logger.debug(f"[storefront console] {msg.type}: {msg.text}")
