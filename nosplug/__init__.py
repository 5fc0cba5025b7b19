"""I420 buffers, frame statistics and rings, a WebSocket server, easing and pin animation."""

__version__ = "0.1.0"