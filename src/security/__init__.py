"""Security module — per-broker rate limiting."""

from src.security.rate_limiter import rate_limiter

__all__ = ["rate_limiter"]
