"""Backend adapters.

The rate limiter talks to storage only through the interfaces defined here,
so the client library behind a connection can change without touching it.
"""
