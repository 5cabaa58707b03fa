"""Exceptions raised by the storefront bridge."""


class StorefrontError(Exception):
    """Base class for every failure the bridge reports to the API."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BrowserLaunchError(StorefrontError):
    """The headless browser could not be started."""


class WidgetNotReadyError(StorefrontError):
    """The Ecwid widget did not become available on the storefront page."""


class WidgetRejectedError(StorefrontError):
    """The widget refused the action (empty cart, unknown action)."""


class ScriptExecutionError(StorefrontError):
    """Any other failure while driving the storefront page."""
