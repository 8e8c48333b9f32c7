"""curlbridge: cURL command language toolkit for a chat-style API client."""

__version__ = "0.3.0"
