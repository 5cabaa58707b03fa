"""FastAPI server exposing Ecwid cart and checkout operations."""
import logging
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from pydantic import BaseModel
import uvicorn

from config import HOST, PORT, CORS_ORIGINS, LOG_LEVEL
from models import (
    AddProductRequest, RemoveProductRequest, AddProductAction, GetCartAction,
    RemoveProductAction, ClearCartAction, CheckoutAction, ActionResult
)
from browser import BrowserManager
from storefront import StorefrontBridge
from errors import StorefrontError, BrowserLaunchError

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    # Startup
    browser_manager = BrowserManager()
    app.state.bridge = StorefrontBridge(browser_manager)
    if browser_manager.reuse:
        logger.info("Starting browser...")
        try:
            await browser_manager.ensure_browser()
        except BrowserLaunchError:
            logger.warning("Browser warm-up failed, will retry on first request")

    yield

    # Shutdown
    logger.info("Shutting down browser...")
    await app.state.bridge.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Ecwid Storefront API",
    description="Cart and checkout operations driven through the Ecwid storefront widget",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_bridge(request: Request) -> StorefrontBridge:
    """Return the bridge created during startup."""
    return request.app.state.bridge


def _serialize(result: ActionResult):
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True)
    return result


def _failure(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.post("/cart/product/add")
async def add_product(body: AddProductRequest, bridge: StorefrontBridge = Depends(get_bridge)):
    """
    Add a product to the cart.

    Expected payload:
    {
        "id": 123456,
        "quantity": 1,
        "options": {"Size": "M"}
    }
    """
    action = AddProductAction(id=body.id, quantity=body.quantity, options=body.options or {})
    result = await bridge.run_action(action)
    return {"success": True, "result": _serialize(result)}


@app.get("/cart")
async def get_cart(bridge: StorefrontBridge = Depends(get_bridge)):
    """Return the current cart snapshot."""
    cart = await bridge.run_action(GetCartAction())
    return {"success": True, "cart": cart}


@app.post("/cart/product/remove")
async def remove_product(body: RemoveProductRequest, bridge: StorefrontBridge = Depends(get_bridge)):
    """Remove the cart item at the given index."""
    logger.info(f"Removing product at index: {body.index}")
    result = await bridge.run_action(RemoveProductAction(index=body.index))
    return {"success": True, "result": _serialize(result)}


@app.post("/cart/clear")
async def clear_cart(bridge: StorefrontBridge = Depends(get_bridge)):
    result = await bridge.run_action(ClearCartAction())
    return {"success": True, "result": _serialize(result)}


@app.post("/checkout")
async def checkout(bridge: StorefrontBridge = Depends(get_bridge)):
    """Open the storefront checkout. Fails when the cart is empty."""
    result = await bridge.run_action(CheckoutAction())
    return {"success": True, "result": _serialize(result)}


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Welcome to the Ecwid Storefront API"


@app.get("/health")
async def health_check(bridge: StorefrontBridge = Depends(get_bridge)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "browser_ready": bridge.is_ready
    }


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Every bridge failure becomes a 500 with the error message."""
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _failure(exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors - return 400 for invalid JSON, 422 for missing fields."""
    errors = exc.errors()

    # Check if it's a JSON decode error
    for error in errors:
        if error.get("type") == "json_invalid":
            return _failure("Invalid JSON", status_code=400)

    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in errors
    )
    return _failure(message, status_code=422)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        log_level=LOG_LEVEL.lower()
    )
