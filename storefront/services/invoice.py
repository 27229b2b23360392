"""
Invoice number generation
"""
import secrets
from datetime import datetime, timezone
from typing import Optional


def generate_invoice_no(now: Optional[datetime] = None) -> str:
    """
    Generate a human-readable invoice number

    Format: INV-<year>-<day of year, 3 digits><random, 3 digits>, in UTC.
    Example: INV-2025-123456 (day 123, random 456).
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    day_of_year = now.timetuple().tm_yday
    suffix = secrets.randbelow(1000)
    return f"INV-{now.year}-{day_of_year:03d}{suffix:03d}"
