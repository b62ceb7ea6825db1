"""
Middleware modules for authentication
"""

from bidguard.middleware.auth import (
    verify_key,
    verify_super_admin,
    api_key_header,
)

__all__ = [
    "verify_key",
    "verify_super_admin",
    "api_key_header",
]
