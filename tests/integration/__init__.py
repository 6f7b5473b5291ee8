"""
Integration tests for the resilience layer.

Test components together against real httpx responses:
- ResilientClient with an httpx.MockTransport-backed AsyncClient
- Retry-After headers and JSON error bodies through the classifier
- Circuit opening under repeated transport errors
"""
