"""
Shared helper utilities for vectorkit.
"""

from vectorkit.utils.hashing import compute_uuid5
from vectorkit.utils.rate_limiter import RateLimiter

__all__ = [
    "RateLimiter",
    "compute_uuid5",
]
