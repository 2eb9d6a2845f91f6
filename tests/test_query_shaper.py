import unittest
from datetime import date, datetime, timezone
from decimal import Decimal

from catalog.schemas.listing import FilterClause, OrderClause, PageRequest
from catalog.services.query_shaper import (
    ListingConfig,
    ListingConfigError,
    ListingQueryError,
    QueryShaper,
    coerce_value,
)


def _config(**overrides) -> ListingConfig:
    values = dict(
        filter_fields={
            "title": "str",
            "price": "int",
            "fee": "decimal",
            "rating": "float",
            "published_on": "date",
            "updated_at": "datetime",
            "featured": "bool",
        },
        order_fields=frozenset({"title", "price", "rating", "published_on"}),
        default_ordering=(OrderClause(field="title", dir="asc"),),
        default_page_size=10,
        max_page_size=100,
    )
    values.update(overrides)
    return ListingConfig(**values)


def _catalog() -> list[dict]:
    # 12 records priced 100..375, 13 priced 500..2000; stored in reverse price order.
    rows = []
    for i in range(25):
        price = 100 + i * 25 if i < 12 else 500 + (i - 12) * 125
        rows.append({"id": i, "title": f"Course {i:02d}", "price": price})
    return list(reversed(rows))


class CoercionTests(unittest.TestCase):
    def test_numbers_accept_string_values(self):
        self.assertEqual(coerce_value("int", "42"), 42)
        self.assertAlmostEqual(coerce_value("float", "3,14"), 3.14)
        self.assertEqual(coerce_value("decimal", "99.50"), Decimal("99.50"))

    def test_invalid_values_raise_value_error(self):
        for kind, raw in [("int", "abc"), ("decimal", ""), ("date", "26/02/2026"), ("bool", "maybe"), ("int", None)]:
            with self.subTest(kind=kind, raw=raw):
                with self.assertRaises(ValueError):
                    coerce_value(kind, raw)

    def test_non_finite_numbers_are_rejected(self):
        for kind, raw in [("decimal", "NaN"), ("decimal", "sNaN"), ("decimal", "Infinity"), ("float", "nan"), ("float", "-inf")]:
            with self.subTest(kind=kind, raw=raw):
                with self.assertRaises(ValueError):
                    coerce_value(kind, raw)

    def test_fractional_values_are_not_integers(self):
        with self.assertRaises(ValueError):
            coerce_value("int", 4.7)
        with self.assertRaises(ValueError):
            coerce_value("int", "4.7")
        self.assertEqual(coerce_value("int", 4.0), 4)

    def test_dates_accept_iso_date_and_datetime(self):
        self.assertEqual(coerce_value("date", "2026-02-26"), date(2026, 2, 26))
        self.assertEqual(coerce_value("date", "2026-02-26T13:45:00+03:00"), date(2026, 2, 26))

    def test_naive_datetime_becomes_utc(self):
        value = coerce_value("datetime", "2026-02-26")
        self.assertEqual(value, datetime(2026, 2, 26, tzinfo=timezone.utc))

    def test_boolean_words(self):
        self.assertTrue(coerce_value("bool", "yes"))
        self.assertFalse(coerce_value("bool", "0"))


class ConfigTests(unittest.TestCase):
    def test_missing_settings_raise_config_error(self):
        for name in ("filter_fields", "order_fields", "default_ordering", "default_page_size"):
            with self.subTest(name=name):
                with self.assertRaises(ListingConfigError):
                    QueryShaper(_config(**{name: None}))

    def test_default_ordering_must_be_whitelisted(self):
        with self.assertRaises(ListingConfigError):
            QueryShaper(_config(default_ordering=(OrderClause(field="secret"),)))

    def test_default_page_size_must_fit_max(self):
        with self.assertRaises(ListingConfigError):
            QueryShaper(_config(default_page_size=500))

    def test_unknown_field_type_is_rejected(self):
        with self.assertRaises(ListingConfigError):
            QueryShaper(_config(filter_fields={"title": "text"}))


class FilterTests(unittest.TestCase):
    def setUp(self):
        self.shaper = QueryShaper(_config())
        self.page = PageRequest(page=1, size=100, max_size=100)
        self.records = [
            {"title": "Algebra Basics", "price": 120, "rating": 4.5, "published_on": "2025-01-15", "featured": True},
            {"title": "Linear algebra", "price": "450", "rating": "4.8", "published_on": date(2025, 2, 3)},
            {"title": "Calculus I", "price": "n/a", "rating": None, "published_on": "not a date"},
            {"title": 1234, "price": 400, "fee": Decimal("10.00"), "updated_at": datetime(2026, 1, 1, 12, 0)},
            {"price": 90},
        ]

    def _titles(self, *filters):
        result = self.shaper.shape(self.records, list(filters), [OrderClause(field="price")], self.page)
        return [r.get("title") for r in result.items]

    def test_exact_is_case_sensitive(self):
        self.assertEqual(self._titles(FilterClause(field="title", value="Linear algebra")), ["Linear algebra"])
        self.assertEqual(self._titles(FilterClause(field="title", value="linear algebra")), [])

    def test_exact_coerces_wire_value_to_field_type(self):
        self.assertEqual(self._titles(FilterClause(field="price", value="450")), ["Linear algebra"])
        self.assertEqual(self._titles(FilterClause(field="featured", value="true")), ["Algebra Basics"])

    def test_icontains_and_istartswith_ignore_case(self):
        self.assertEqual(
            self._titles(FilterClause(field="title", op="icontains", value="ALGEBRA")),
            ["Algebra Basics", "Linear algebra"],
        )
        self.assertEqual(self._titles(FilterClause(field="title", op="istartswith", value="cal")), ["Calculus I"])

    def test_text_lookups_exclude_missing_and_non_string_values(self):
        self.assertEqual(self._titles(FilterClause(field="title", op="icontains", value="12")), [])
        self.assertEqual(self._titles(FilterClause(field="title", op="istartswith", value="")), [
            "Algebra Basics",
            "Linear algebra",
            "Calculus I",
        ])

    def test_text_lookups_on_non_text_fields_match_nothing(self):
        self.assertEqual(self._titles(FilterClause(field="price", op="icontains", value="45")), [])

    def test_comparisons_skip_records_that_do_not_parse(self):
        self.assertEqual(
            self._titles(FilterClause(field="price", op="gte", value=100)),
            ["Algebra Basics", 1234, "Linear algebra"],
        )
        self.assertEqual(self._titles(FilterClause(field="price", op="lt", value="120")), [None])
        self.assertEqual(self._titles(FilterClause(field="price", op="gt", value="400")), ["Linear algebra"])

    def test_unparsable_clause_value_excludes_everything(self):
        result = self.shaper.shape(self.records, [FilterClause(field="price", op="lte", value="cheap")], [], self.page)
        self.assertEqual(result.items, ())
        self.assertEqual(result.total, 0)
        self.assertEqual(result.total_pages, 0)

    def test_nan_decimal_clause_excludes_everything(self):
        records = [{"fee": Decimal("100")}, {"fee": Decimal("NaN")}, {"fee": "sNaN"}]
        for op, raw in [("lte", "NaN"), ("gt", "sNaN"), ("exact", "sNaN"), ("gte", "Infinity")]:
            with self.subTest(op=op, raw=raw):
                result = self.shaper.shape(records, [FilterClause(field="fee", op=op, value=raw)], [], self.page)
                self.assertEqual(result.total, 0)

    def test_nan_record_values_are_skipped(self):
        records = [{"fee": Decimal("100")}, {"fee": Decimal("NaN")}, {"fee": "sNaN"}]
        result = self.shaper.shape(records, [FilterClause(field="fee", op="lte", value="500")], [], self.page)
        self.assertEqual(result.items, ({"fee": Decimal("100")},))

    def test_fractional_clause_value_on_int_field_matches_nothing(self):
        records = [{"price": 4}, {"price": 5}, {"price": 4.7}]
        for op in ("exact", "lte", "gt"):
            with self.subTest(op=op):
                result = self.shaper.shape(records, [FilterClause(field="price", op=op, value=4.7)], [], self.page)
                self.assertEqual(result.total, 0)
        result = self.shaper.shape(records, [FilterClause(field="price", op="gte", value=4)], [], self.page)
        self.assertEqual([r["price"] for r in result.items], [4, 5])

    def test_date_decimal_float_and_datetime_comparisons(self):
        self.assertEqual(
            self._titles(FilterClause(field="published_on", op="gte", value="2025-02-01")),
            ["Linear algebra"],
        )
        self.assertEqual(self._titles(FilterClause(field="fee", op="lte", value="10")), [1234])
        self.assertEqual(self._titles(FilterClause(field="rating", op="gt", value="4,6")), ["Linear algebra"])
        self.assertEqual(
            self._titles(FilterClause(field="updated_at", op="gte", value="2026-01-01T12:00:00Z")),
            [1234],
        )

    def test_clauses_are_combined_with_and(self):
        self.assertEqual(
            self._titles(
                FilterClause(field="title", op="icontains", value="algebra"),
                FilterClause(field="price", op="lte", value=400),
            ),
            ["Algebra Basics"],
        )


class ShapeTests(unittest.TestCase):
    def setUp(self):
        self.shaper = QueryShaper(_config(filter_fields={"title": "str", "price": "int"}))
        self.records = _catalog()

    def test_filter_order_paginate_first_page(self):
        result = self.shaper.shape(
            self.records,
            [FilterClause(field="price", op="lte", value=400)],
            [OrderClause(field="price", dir="asc")],
            PageRequest(page=1, size=10, max_size=100),
        )
        prices = [r["price"] for r in result.items]
        self.assertEqual(len(prices), 10)
        self.assertTrue(all(p <= 400 for p in prices))
        self.assertEqual(prices, sorted(prices))
        self.assertEqual(result.total, 12)
        self.assertEqual(result.total_pages, 2)
        self.assertTrue(result.has_next)
        self.assertFalse(result.has_previous)

    def test_page_beyond_last_is_empty_not_an_error(self):
        result = self.shaper.shape(
            self.records,
            [FilterClause(field="price", op="lte", value=400)],
            [OrderClause(field="price")],
            PageRequest(page=999, size=10, max_size=100),
        )
        self.assertEqual(result.items, ())
        self.assertFalse(result.has_next)
        self.assertTrue(result.has_previous)
        self.assertEqual(result.total, 12)
        self.assertEqual(result.page, 999)

    def test_descending_primary_key_with_ascending_tie_break(self):
        records = [
            {"title": "Zoology", "price": 300},
            {"title": "Botany", "price": 500},
            {"title": "Anatomy", "price": 500},
            {"title": "Ecology", "price": 100},
        ]
        result = self.shaper.shape(
            records,
            [],
            [OrderClause(field="price", dir="desc"), OrderClause(field="title", dir="asc")],
            PageRequest(page=1, size=10, max_size=100),
        )
        self.assertEqual([r["title"] for r in result.items], ["Anatomy", "Botany", "Zoology", "Ecology"])

    def test_sort_is_stable_for_equal_keys(self):
        records = [{"id": i, "title": "Same", "price": i % 2} for i in range(10)]
        result = self.shaper.shape(records, [], [OrderClause(field="price", dir="desc")], PageRequest(size=10))
        self.assertEqual([r["id"] for r in result.items], [1, 3, 5, 7, 9, 0, 2, 4, 6, 8])

    def test_missing_values_sort_last_ascending_and_first_descending(self):
        records = [{"title": "B", "price": 2}, {"title": "none"}, {"title": "A", "price": 1}]
        up = self.shaper.shape(records, [], [OrderClause(field="price")], PageRequest(size=10))
        down = self.shaper.shape(records, [], [OrderClause(field="price", dir="desc")], PageRequest(size=10))
        self.assertEqual([r["title"] for r in up.items], ["A", "B", "none"])
        self.assertEqual([r["title"] for r in down.items], ["none", "B", "A"])

    def test_pages_cover_the_whole_sequence_once(self):
        everything = self.shaper.shape(self.records, [], [OrderClause(field="price")], PageRequest(size=100))
        collected = []
        first = self.shaper.shape(self.records, [], [OrderClause(field="price")], PageRequest(page=1, size=7))
        for page in range(1, first.total_pages + 1):
            result = self.shaper.shape(self.records, [], [OrderClause(field="price")], PageRequest(page=page, size=7))
            self.assertLessEqual(len(result.items), 7)
            collected.extend(result.items)
        self.assertEqual(first.total_pages, 4)
        self.assertEqual(tuple(collected), everything.items)

    def test_same_inputs_give_equal_results(self):
        args = (
            self.records,
            [FilterClause(field="price", op="gte", value="500")],
            [OrderClause(field="title", dir="desc")],
            PageRequest(page=2, size=5),
        )
        self.assertEqual(self.shaper.shape(*args), self.shaper.shape(*args))

    def test_extra_clause_never_grows_the_result(self):
        one = self.shaper.shape(self.records, [FilterClause(field="price", op="lte", value=1000)], [], PageRequest())
        two = self.shaper.shape(
            self.records,
            [FilterClause(field="price", op="lte", value=1000), FilterClause(field="title", op="icontains", value="1")],
            [],
            PageRequest(),
        )
        self.assertLessEqual(two.total, one.total)

    def test_non_whitelisted_fields_are_ignored(self):
        page = PageRequest(size=25, max_size=100)
        baseline = self.shaper.shape(self.records, [], [], page)
        with_secret = self.shaper.shape(
            self.records,
            [FilterClause(field="id", value="3")],
            [OrderClause(field="id", dir="desc")],
            page,
        )
        self.assertEqual(with_secret, baseline)
        self.assertEqual(baseline.items[0]["title"], "Course 00")

    def test_duplicate_order_fields_keep_first_direction(self):
        result = self.shaper.shape(
            self.records,
            [],
            [OrderClause(field="price", dir="desc"), OrderClause(field="price", dir="asc")],
            PageRequest(size=3),
        )
        self.assertEqual([r["price"] for r in result.items], [2000, 1875, 1750])

    def test_page_size_is_clamped_to_configured_max(self):
        shaper = QueryShaper(_config(filter_fields={"price": "int"}, max_page_size=5, default_page_size=5))
        result = shaper.shape(self.records, [], [], PageRequest(page=1, size=50, max_size=50))
        self.assertEqual(len(result.items), 5)
        self.assertEqual(result.total_pages, 5)

    def test_empty_collection(self):
        result = self.shaper.shape([], [], [], PageRequest())
        self.assertEqual(result.total, 0)
        self.assertEqual(result.total_pages, 0)
        self.assertFalse(result.has_next)
        self.assertFalse(result.has_previous)

    def test_input_records_are_not_mutated(self):
        snapshot = [dict(r) for r in self.records]
        order_before = [r["id"] for r in self.records]
        self.shaper.shape(self.records, [], [OrderClause(field="price")], PageRequest())
        self.assertEqual(self.records, snapshot)
        self.assertEqual([r["id"] for r in self.records], order_before)

    def test_objects_with_attributes_are_accepted(self):
        class Row:
            def __init__(self, title, price):
                self.title = title
                self.price = price

        rows = [Row("B", 2), Row("A", 1)]
        result = self.shaper.shape(rows, [FilterClause(field="price", op="gte", value=1)], [OrderClause(field="price")], PageRequest())
        self.assertEqual([r.title for r in result.items], ["A", "B"])


class StrictModeTests(unittest.TestCase):
    def setUp(self):
        self.shaper = QueryShaper(_config(strict=True))

    def test_unknown_filter_field_raises(self):
        with self.assertRaises(ListingQueryError) as ctx:
            self.shaper.shape([], [FilterClause(field="secret", value="1")], [], PageRequest())
        self.assertEqual(ctx.exception.param, "secret")

    def test_unknown_order_field_raises(self):
        with self.assertRaises(ListingQueryError):
            self.shaper.shape([], [], [OrderClause(field="secret")], PageRequest())


if __name__ == "__main__":
    unittest.main()
