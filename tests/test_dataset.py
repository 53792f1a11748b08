"""
Tests for matrix parsing, metadata join and reference metrics.
"""
import pytest

from refmap.dataset import birth_year_of, build_dataset
from refmap.matrix import parse_entity_list_csv, parse_matrix_csv
from refmap.metrics import active_counts, with_active_counts


class TestMatrix:

    def test_axes_are_normalized(self, matrix):
        assert "Epictete" in matrix.columns
        assert matrix.has_row("Epictete")
        assert matrix.value("Epictete", "Socrates") == 4

    def test_blank_cell_is_missing(self, matrix):
        assert matrix.value("Socrates", "Epictete") is None
        assert matrix.count("Socrates", "Epictete") == 0

    def test_names_columns_then_rows(self):
        m = parse_matrix_csv(",A,B\nA,0,1\nC,2,0\n")
        assert m.names() == ["A", "B", "C"]

    def test_duplicate_rows_are_merged(self):
        m = parse_matrix_csv(",A,B\nB,1,0\nB,2,0\n")
        assert m.value("B", "A") == 3
        assert len(m) == 1

    def test_empty_csv_rejected(self):
        with pytest.raises(ValueError):
            parse_matrix_csv("")

    def test_entity_list_requires_author(self):
        with pytest.raises(ValueError):
            parse_entity_list_csv("Name,Birth Year\nPlato,-428\n")


class TestDataset:

    def test_entities_sorted_by_incoming(self, dataset):
        assert [e.name for e in dataset.entities] == ["Plato", "Socrates", "Aristotle", "Epictete", "Nobody"]
        assert dataset.by_name["Plato"].incoming_refs == 17
        assert dataset.by_name["Plato"].outgoing_refs == 16

    def test_missing_metadata_is_not_plottable(self, dataset):
        nobody = dataset.by_name["Nobody"]
        assert nobody.birth_year is None
        assert nobody.display_name == "Nobody"
        assert "Nobody" not in dataset.plottable_names()

    def test_missing_metadata_still_counts(self, dataset):
        # Nobody -> Plato = 2 is part of Plato's full incoming total
        assert dataset.by_name["Plato"].incoming_refs == 3 + 12 + 2

    def test_birth_year_estimated_from_death(self, dataset):
        epictete = dataset.by_name["Epictete"]
        assert epictete.birth_year == 85.0
        assert epictete.display_name == "Epictetus"

    @pytest.mark.parametrize("meta,expected", [
        ({"Birth Year": "-428", "Death Year": "-348"}, -428.0),
        ({"Birth Year": "", "Death Year": "135"}, 85.0),
        ({"Birth Year": "", "Death Year": ""}, None),
        ({}, None),
        (None, None),
    ])
    def test_birth_year_of(self, meta, expected):
        assert birth_year_of(meta) == expected

    def test_display_name_fallback(self, matrix):
        meta = parse_entity_list_csv("Author,Display Name,Birth Year\nPlato,,-428\n")
        ds = build_dataset("philosophers", "Philosophers", matrix, meta)
        assert ds.by_name["Plato"].display_name == "Plato"


class TestActiveCounts:

    def test_outgoing_is_row_sum_over_active(self, dataset):
        counts = active_counts(dataset.matrix, ["Plato"], ["Plato", "Socrates", "Aristotle"])
        assert counts["Plato"] == (15, 15)

    def test_unchecking_removes_from_both_axes(self, dataset):
        counts = active_counts(dataset.matrix, ["Plato", "Socrates"], ["Plato", "Socrates"])
        assert counts["Plato"] == (10, 3)
        assert counts["Socrates"] == (3, 10)

    def test_counts_for_every_entity_are_non_negative(self, dataset):
        active = dataset.plottable_names()
        for e in with_active_counts(dataset.entities, dataset.matrix, active):
            assert e.outgoing_refs >= 0
            assert e.incoming_refs >= 0
            assert e.outgoing_refs == sum(dataset.matrix.count(e.name, a) for a in active)
            assert e.incoming_refs == sum(dataset.matrix.count(a, e.name) for a in active)

    def test_nothing_active(self, dataset):
        counts = active_counts(dataset.matrix, ["Plato"], [])
        assert counts["Plato"] == (0, 0)

    def test_with_active_counts_does_not_mutate(self, dataset):
        before = dataset.by_name["Plato"].outgoing_refs
        with_active_counts(dataset.entities, dataset.matrix, ["Plato"])
        assert dataset.by_name["Plato"].outgoing_refs == before
