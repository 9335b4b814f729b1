from .base import DavidClient, HtmlPage

__all__ = ["DavidClient", "HtmlPage"]
