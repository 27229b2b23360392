import re
from datetime import datetime, timedelta, timezone

from storefront.services.invoice import generate_invoice_no


def test_invoice_number_format():
    assert re.match(r"^INV-\d{4}-\d{6}$", generate_invoice_no())


def test_invoice_number_uses_utc_day_of_year():
    invoice_no = generate_invoice_no(datetime(2025, 5, 3, 12, 0, tzinfo=timezone.utc))

    assert invoice_no.startswith("INV-2025-123")


def test_invoice_number_converts_to_utc():
    kuwait = timezone(timedelta(hours=3))

    invoice_no = generate_invoice_no(datetime(2026, 1, 1, 1, 0, tzinfo=kuwait))

    assert invoice_no.startswith("INV-2025-365")
