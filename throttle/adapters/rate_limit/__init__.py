"""Window storage adapters.

The limiter depends on ``AbstractWindowStore`` only, so the in-memory store
can later be replaced by a shared one without changing the HTTP layer.
"""
