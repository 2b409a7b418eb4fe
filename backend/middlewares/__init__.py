"""
Middlewares package initialization.
Exports authentication and rate limiting decorators.
"""

from .auth import IdentityVerifier, bearer_token_required
from .rate_limit import SlidingWindowRateLimiter, rate_limited

__all__ = ['IdentityVerifier', 'bearer_token_required', 'SlidingWindowRateLimiter', 'rate_limited']
