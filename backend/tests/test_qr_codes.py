from datetime import datetime

import pytest

from app.core.errors import ValidationError
from app.models import QRCode
from app.services import qr_codes as svc


@pytest.fixture()
def scans(session):
    rows = [
        QRCode(content="12345-67890-71 LOT-A", quantity=10, scanned_at=datetime(2024, 6, 1, 9, 0)),
        QRCode(content="22222-00000-01", quantity=4, scanned_at=datetime(2024, 6, 2, 9, 0)),
        QRCode(content="lot-b 12345-67890-71", quantity=7, scanned_at=None),
        QRCode(content="33333-00000-02", quantity=1, scanned_at=datetime(2024, 5, 31, 17, 30)),
    ]
    session.add_all(rows)
    session.commit()
    return rows


def _contents(rows):
    return [r.content for r in rows]


def test_default_is_newest_first_with_unscanned_on_top(session, scans):
    assert _contents(svc.list_codes(session)) == [
        "lot-b 12345-67890-71",
        "22222-00000-01",
        "12345-67890-71 LOT-A",
        "33333-00000-02",
    ]


def test_ascending_puts_unscanned_last(session, scans):
    assert _contents(svc.list_codes(session, "asc")) == [
        "33333-00000-02",
        "12345-67890-71 LOT-A",
        "22222-00000-01",
        "lot-b 12345-67890-71",
    ]


def test_search_is_case_insensitive_partial(session, scans):
    rows = svc.list_codes(session, "asc", q="LOT")
    assert _contents(rows) == ["12345-67890-71 LOT-A", "lot-b 12345-67890-71"]
    assert svc.list_codes(session, q="99999") == []


def test_blank_search_returns_everything(session, scans):
    assert len(svc.list_codes(session, q="  ")) == 4


def test_bad_order(session, scans):
    with pytest.raises(ValidationError):
        svc.list_codes(session, "newest")
