"""
Technique filter tests.
"""

import pytest

from conftest import make_selection, make_technique


class TestFilterTechnique:

    def test_matching_level_for_selected_source(self):
        from services.technique_filter import filter_technique

        assert filter_technique(make_technique(1, aikikai=5), make_selection(levels=(5,))) is True

    def test_level_not_selected(self):
        from services.technique_filter import filter_technique

        assert filter_technique(make_technique(1, aikikai=4), make_selection(levels=(5,))) is False

    def test_level_only_for_other_source(self):
        from services.technique_filter import filter_technique

        technique = make_technique(1, aikicircle=5)
        assert filter_technique(technique, make_selection(levels=(5,))) is False
        # Not unclassified either: it carries a level for a known source
        assert filter_technique(technique, make_selection(levels=(5,), include_unclassified=True)) is False

    def test_unclassified_included_only_on_request(self):
        from services.technique_filter import filter_technique

        technique = make_technique(1)
        assert filter_technique(technique, make_selection()) is False
        assert filter_technique(technique, make_selection(include_unclassified=True)) is True

    def test_level_for_unknown_source_counts_as_unclassified(self):
        from services.technique_filter import filter_technique

        technique = make_technique(1, yoshinkan=5)
        assert filter_technique(technique, make_selection(include_unclassified=True)) is True


class TestFilterTechniques:

    def test_keeps_catalog_order(self, catalog):
        from services.technique_filter import filter_techniques

        result = filter_techniques(catalog, make_selection(levels=(5, 4)))
        assert [t.id for t in result] == [1, 2, 3, 4, 5, 6]

    def test_four_of_ten(self, catalog):
        from services.technique_filter import filter_techniques

        assert len(filter_techniques(catalog, make_selection(levels=(5,)))) == 4

    def test_other_source(self, catalog):
        from services.technique_filter import filter_techniques

        result = filter_techniques(catalog, make_selection(levels=(3,), source="aikicircle"))
        assert [t.id for t in result] == [5, 6]


class TestPreferenceSelection:

    def test_empty_levels_rejected(self):
        with pytest.raises(ValueError):
            make_selection(levels=())

    def test_unknown_source_rejected(self):
        with pytest.raises(ValueError):
            make_selection(source="yoshinkan")
