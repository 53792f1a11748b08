"""
Tests for focal point selection, search and link filtering.
"""
from refmap.dataset import build_dataset
from refmap.focal import focal_selection, search_entities, top_incoming, top_outgoing
from refmap.links import bidirectional_pairs, compute_links, curve_direction
from refmap.matrix import parse_entity_list_csv, parse_matrix_csv


class TestFocal:

    def test_top_incoming_and_outgoing(self, dataset):
        assert top_incoming(dataset.matrix, "Plato", 3) == ["Aristotle", "Socrates", "Nobody"]
        assert top_outgoing(dataset.matrix, "Plato", 2) == ["Socrates", "Aristotle"]

    def test_selection_restricted_to_plottable(self, dataset):
        selected = focal_selection(dataset, "Plato", 3, 2)
        assert selected == {"Plato", "Aristotle", "Socrates"}

    def test_zero_counts_select_only_focal(self, dataset):
        assert focal_selection(dataset, "Socrates", 0, 0) == {"Socrates"}

    def test_zero_references_never_selected(self, dataset):
        # Epictete cites Socrates only
        assert top_outgoing(dataset.matrix, "Epictete", 5) == ["Socrates"]

    def test_ties_broken_alphabetically(self):
        m = parse_matrix_csv(",X,Zeno,Anaxagoras,Melissus\nZeno,4,0,0,0\nAnaxagoras,4,0,0,0\nMelissus,4,0,0,0\nX,0,0,0,0\n")
        assert top_incoming(m, "X", 2) == ["Anaxagoras", "Melissus"]


class TestSearch:

    def test_case_insensitive_substring(self, dataset):
        assert [e.name for e in search_entities(dataset, "PLA")] == ["Plato"]

    def test_only_plottable(self, dataset):
        assert search_entities(dataset, "nobody") == []

    def test_empty_term(self, dataset):
        assert search_entities(dataset, "") == []

    def test_limit(self, dataset):
        assert len(search_entities(dataset, "o", limit=2)) == 2


class TestLinks:

    def _links(self, dataset, active, threshold):
        by_name = {e.name: e for e in dataset.entities}
        return {l.id: l for l in compute_links(dataset.matrix, by_name, active, threshold)}

    def test_threshold_filters(self, dataset):
        links = self._links(dataset, dataset.plottable_names(), 5)
        assert set(links) == {"Plato->Socrates", "Plato->Aristotle", "Aristotle->Plato"}
        assert all(l.value >= 5 for l in links.values())

    def test_unchecked_entity_drops_links(self, dataset):
        links = self._links(dataset, ["Plato", "Socrates", "Epictete"], 5)
        assert set(links) == {"Plato->Socrates"}

    def test_blank_cells_never_link(self, dataset):
        links = self._links(dataset, dataset.plottable_names(), 0)
        assert "Socrates->Epictete" not in links
        assert "Plato->Plato" not in links
        assert len(links) == 11

    def test_bidirectional_curves_opposite(self, dataset):
        links = self._links(dataset, dataset.plottable_names(), 5)
        assert links["Aristotle->Plato"].curve_direction == 1
        assert links["Plato->Aristotle"].curve_direction == -1
        assert links["Plato->Socrates"].curve_direction == 1

    def test_bidirectional_pairs_use_whole_matrix(self, dataset):
        assert bidirectional_pairs(dataset.matrix, 2) == {("Aristotle", "Plato"), ("Plato", "Socrates")}
        # Nobody is never plotted but still forms a two-way pair with Plato
        assert ("Nobody", "Plato") in bidirectional_pairs(dataset.matrix, 1)

    def test_curve_direction(self):
        assert curve_direction("A", "B", False) == 1
        assert curve_direction("A", "B", True) == 1
        assert curve_direction("B", "A", True) == -1

    def test_links_to_unplottable_are_skipped(self):
        m = parse_matrix_csv(",A,B\nA,0,9\nB,9,0\n")
        meta = parse_entity_list_csv("Author,Display Name,Birth Year,Death Year\nA,A,100,\n")
        ds = build_dataset("general", "General", m, meta)
        by_name = {e.name: e for e in ds.plottable}
        assert compute_links(m, by_name, ["A", "B"], 1) == []
