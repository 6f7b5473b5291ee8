"""Sliding window rate limiting for outbound call volume."""

from resilience_layer.ratelimit.limiter import SlidingWindowRateLimiter

__all__ = ["SlidingWindowRateLimiter"]
