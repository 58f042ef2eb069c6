"""WebSocket building blocks: opening handshakes, permessage-deflate, URLs, headers, UDP and TLS."""

__version__ = "0.1.0"