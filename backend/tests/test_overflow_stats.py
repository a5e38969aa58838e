"""Overflow aggregation, drill-down and the presentation transforms."""
from datetime import date, datetime, timedelta

import pytest

from app.core.errors import ValidationError
from app.schemas import OverflowStat
from app.services import overflow as ledger
from app.services import overflow_stats as agg

P1 = "12345-67890-71"
P2 = "33333-00000-02"


def _record(session, product, qty, when, reason="over_production"):
    return ledger.record_overflow(session, product, qty, reason, now=when)


class TestComputeStats:
    def test_concrete_scenario(self, session, products):
        _record(session, P1, 3, datetime(2024, 1, 15, 8, 0))
        _record(session, P1, 5, datetime(2024, 6, 3, 14, 30))
        _record(session, P1, 2, datetime(2024, 12, 31, 23, 59))

        stats = agg.compute_stats(session, date(2024, 1, 1), date(2024, 12, 31))
        assert len(stats) == 1
        assert stats[0].product_number == P1
        assert stats[0].total_quantity == 10
        assert stats[0].overflow_count == 3
        assert stats[0].location_number == "123456"

    def test_groups_per_product_and_skips_deleted(self, session, products):
        _record(session, P1, 3, datetime(2024, 3, 1, 9))
        gone = _record(session, P1, 100, datetime(2024, 3, 2, 9))
        _record(session, P2, 7, datetime(2024, 3, 3, 9))
        ledger.soft_delete_by_id(session, gone.id)

        stats = agg.compute_stats(session, date(2024, 3, 1), date(2024, 3, 31))
        by_product = {s.product_number: (s.total_quantity, s.overflow_count) for s in stats}
        assert by_product == {P1: (3, 1), P2: (7, 1)}

    def test_single_day_window_is_inclusive(self, session, products):
        day = date(2024, 5, 10)
        _record(session, P1, 1, datetime(2024, 5, 10, 0, 0))
        _record(session, P1, 2, datetime(2024, 5, 10, 23, 59, 59))
        _record(session, P1, 50, datetime(2024, 5, 9, 23, 59, 59))
        _record(session, P1, 60, datetime(2024, 5, 11, 0, 0))

        stats = agg.compute_stats(session, day, day)
        assert [(s.total_quantity, s.overflow_count) for s in stats] == [(3, 2)]

    def test_day_outside_window_excluded(self, session, products):
        _record(session, P1, 4, datetime(2024, 1, 1, 12))
        assert agg.compute_stats(session, date(2024, 1, 2), date(2024, 1, 31)) == []
        assert agg.compute_stats(session, date(2023, 12, 1), date(2023, 12, 31)) == []

    def test_empty_is_valid(self, session, products):
        assert agg.compute_stats(session, date(2024, 1, 1), date(2024, 12, 31)) == []

    def test_idempotent(self, session, products):
        base = datetime(2024, 2, 1, 10)
        for i, (product, qty) in enumerate([(P1, 1), (P2, 4), (P1, 2), (P2, 1)]):
            _record(session, product, qty, base + timedelta(hours=i))

        first = agg.compute_stats(session, date(2024, 1, 1), date(2024, 12, 31))
        second = agg.compute_stats(session, date(2024, 1, 1), date(2024, 12, 31))
        assert [s.model_dump() for s in first] == [s.model_dump() for s in second]

    def test_reversed_window_rejected(self, session, products):
        with pytest.raises(ValidationError):
            agg.compute_stats(session, date(2024, 2, 1), date(2024, 1, 1))


class TestComputeDetail:
    def test_includes_deleted_with_latency(self, session, products):
        created = datetime(2024, 4, 1, 10, 0)
        resolved = _record(session, P1, 3, created)
        open_ = _record(session, P1, 1, created + timedelta(days=1))
        ledger.soft_delete_by_id(session, resolved.id, now=created + timedelta(days=2, hours=23))

        rows = agg.compute_detail(session, P1)
        assert [r.id for r in rows] == [open_.id, resolved.id]
        assert rows[0].deleted_after_days is None
        assert rows[1].is_deleted is True
        assert rows[1].deleted_after_days == 2

    def test_not_date_filtered(self, session, products):
        _record(session, P1, 1, datetime(2019, 1, 1))
        _record(session, P1, 1, datetime(2030, 1, 1))
        assert len(agg.compute_detail(session, P1)) == 2

    def test_other_products_excluded(self, session, products):
        _record(session, P2, 1, datetime(2024, 1, 1))
        assert agg.compute_detail(session, P1) == []

    def test_latency_floor(self):
        created = datetime(2024, 1, 1, 12)
        assert agg.deleted_after_days(created, None) is None
        assert agg.deleted_after_days(created, created + timedelta(hours=23, minutes=59)) == 0
        assert agg.deleted_after_days(created, created + timedelta(days=1)) == 1


def _stat(product, count):
    return OverflowStat(product_number=product, total_quantity=count, overflow_count=count)


class TestSort:
    def test_desc_and_asc(self):
        rows = [_stat("a", 2), _stat("b", 5), _stat("c", 1)]
        assert [s.product_number for s in agg.sort_stats(rows, "desc")] == ["b", "a", "c"]
        assert [s.product_number for s in agg.sort_stats(rows, "asc")] == ["c", "a", "b"]

    def test_does_not_mutate_input(self):
        rows = [_stat("a", 1), _stat("b", 2)]
        agg.sort_stats(rows, "desc")
        assert [s.product_number for s in rows] == ["a", "b"]

    def test_ties_keep_input_order(self):
        rows = [_stat("a", 3), _stat("b", 3), _stat("c", 3)]
        assert [s.product_number for s in agg.sort_stats(rows, "asc")] == ["a", "b", "c"]

    def test_bad_order(self):
        with pytest.raises(ValidationError):
            agg.sort_stats([], "sideways")


class TestPaginate:
    items = list(range(12))

    def test_page_count(self):
        assert agg.paginate(self.items, 0).total_pages == 3
        assert agg.page_count(10, 5) == 2
        assert agg.page_count(0, 5) == 0

    def test_negative_page_clamps_to_first(self):
        page = agg.paginate(self.items, -1)
        assert page.page == 0
        assert page.items == [0, 1, 2, 3, 4]

    def test_past_end_clamps_to_last(self):
        page = agg.paginate(self.items, 3)
        assert page.page == 2
        assert page.items == [10, 11]

    def test_middle_page(self):
        page = agg.paginate(self.items, 1)
        assert page.items == [5, 6, 7, 8, 9]
        assert page.total == 12

    def test_empty(self):
        page = agg.paginate([], 4)
        assert (page.page, page.total_pages, page.items) == (0, 0, [])

    def test_bad_page_size(self):
        with pytest.raises(ValidationError):
            agg.paginate(self.items, 0, page_size=0)


def test_stats_csv_has_japanese_header():
    text = agg.stats_to_csv([_stat("12345-67890-71", 3)])
    lines = text.strip().splitlines()
    assert lines[0] == "品番,ロケーション番号,オーバーフロー数量,オーバーフロー回数"
    assert lines[1].startswith("12345-67890-71,")


def test_stats_csv_empty_keeps_header():
    assert agg.stats_to_csv([]).strip() == "品番,ロケーション番号,オーバーフロー数量,オーバーフロー回数"
