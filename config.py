"""Configuration management for the Ecwid Storefront API."""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Server Configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Storefront Configuration
STOREFRONT_URL = os.getenv("STOREFRONT_URL", "https://ecwid-storefront.vercel.app/")
WIDGET_TIMEOUT_MS = int(os.getenv("WIDGET_TIMEOUT_MS", 7000))
NAVIGATION_TIMEOUT_MS = int(os.getenv("NAVIGATION_TIMEOUT_MS", 30000))

# Browser Configuration
# Vercel and AWS Lambda both set their own marker variables
SERVERLESS = _env_flag("SERVERLESS", bool(os.getenv("VERCEL") or os.getenv("AWS_LAMBDA_FUNCTION_NAME")))
BROWSER_REUSE = _env_flag("BROWSER_REUSE", not SERVERLESS)
HEADLESS = _env_flag("HEADLESS", True)
CHROME_EXECUTABLE_PATH = os.getenv("CHROME_EXECUTABLE_PATH", "")
CHROMIUM_EXECUTABLE_PATH = os.getenv("CHROMIUM_EXECUTABLE_PATH", "")
IGNORE_HTTPS_ERRORS = _env_flag("IGNORE_HTTPS_ERRORS", True)
VIEWPORT_WIDTH = int(os.getenv("VIEWPORT_WIDTH", 1920))
VIEWPORT_HEIGHT = int(os.getenv("VIEWPORT_HEIGHT", 1080))
