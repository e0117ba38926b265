#!/usr/bin/env python3
"""
Entry point for the Court Booking API.

Settings come from court_booking.config (environment or .env).
"""

import uvicorn

from court_booking.config import API_HOST, API_PORT, API_RELOAD, LOG_LEVEL

if __name__ == "__main__":
    uvicorn.run(
        "court_booking.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD,
        log_level=LOG_LEVEL.lower(),
    )
