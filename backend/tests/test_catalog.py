import pandas as pd
import pytest

from app.core.errors import NotFoundError, ValidationError
from app.models import Product
from app.services import catalog


def test_lookup(session, products):
    p = catalog.lookup(session, "12345-67890-71")
    assert (p.location_number, p.box_type, p.location_capacity) == ("123456", "A", 50)
    assert catalog.lookup(session, "nope") is None
    assert catalog.lookup(session, "") is None


def test_get_product_not_found(session, products):
    with pytest.raises(NotFoundError):
        catalog.get_product(session, "nope")


def test_search_partial_case_insensitive(session, products):
    session.add(Product(product_number="ABC-001", location_number="1"))
    session.commit()

    result = catalog.search_products(session, q="abc")
    assert [p.product_number for p in result["rows"]] == ["ABC-001"]
    assert result["total"] == 1


def test_search_pages_of_ten(session):
    session.add_all(
        [Product(product_number=f"P-{i:03d}", location_number=str(i)) for i in range(23)]
    )
    session.commit()

    first = catalog.search_products(session, page=1)
    last = catalog.search_products(session, page=99)
    assert first["total_pages"] == 3
    assert len(first["rows"]) == 10
    assert first["rows"][0].product_number == "P-000"
    assert last["page"] == 3
    assert [p.product_number for p in last["rows"]] == ["P-020", "P-021", "P-022"]


def test_import_products_upserts(session, products):
    df = pd.DataFrame(
        {
            "品番": ["12345-67890-71", "NEW-1", "NEW-1", "BAD-1", ""],
            "ロケーション番号": ["654321", "700001", "700002", "700003", "700004"],
            "箱種": ["C", "", "D", "E", "F"],
            "収容能力": ["80", "10", "1,200", "-5", "1"],
        }
    )
    summary = catalog.import_products(df, session)

    assert summary["total_rows"] == 5
    assert summary["success_rows"] == 2
    assert [e["row"] for e in summary["errors"]] == [5, 6]

    updated = catalog.lookup(session, "12345-67890-71")
    session.refresh(updated)
    assert (updated.location_number, updated.box_type, updated.location_capacity) == ("654321", "C", 80)
    # 同一品番はファイル内で最後の行を採用
    new = catalog.lookup(session, "NEW-1")
    assert (new.location_number, new.box_type, new.location_capacity) == ("700002", "D", 1200)


def test_import_products_from_csv_bytes_with_aliases(session):
    raw = "product_number,location_number,box_type,location_capacity\nX-1,100100,A,30\n".encode("utf-8")
    summary = catalog.import_products(raw, session)
    assert summary["success_rows"] == 1
    assert catalog.lookup(session, "X-1").location_capacity == 30


def test_import_requires_product_column(session):
    with pytest.raises(ValidationError):
        catalog.import_products(pd.DataFrame({"foo": ["1"]}), session)
