"""
fly-admin - Typed client for the Fly.io platform APIs.

Layers:
- core: Raw types, result normalization and HTTP client
- sdk: FlyClient with one accessor per resource family
- cli: Command-line interface
"""

from fly_admin.sdk import FlyClient

__version__ = "0.1.0"
__all__ = ["FlyClient"]
