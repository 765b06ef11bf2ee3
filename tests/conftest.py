"""Pytest configuration and shared fixtures."""

from hypothesis import settings

# Compression of large examples can be slow on CI: no per-example deadline.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
