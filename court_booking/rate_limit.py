"""
Rate limiting configuration using slowapi.

Two tiers:
  • write   – 20/min (reservation creation and updates)
  • default – 60/min (everything else)

The limiter keys on client IP by default.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["60/minute"])

# Named rate strings for use in @limiter.limit() decorators
WRITE = "20/minute"      # bookings and edits
DEFAULT = "60/minute"    # reads and availability checks
