"""
Unit tests for the resilience layer.

Test individual components in isolation:
- Data models (defaults, validation, immutability)
- Backoff calculator (growth, cap, jitter bounds)
- Error classifier and error code catalogue
- Circuit breaker state machine (fake clock)
- Sliding window rate limiter (fake clock)
- Retry engine and manual retry controller
"""
