from footprint.factors import INITIAL_MATERIAL_DB, MaterialFactor
from ui.search import filter_options, find_option, option_label


def test_option_label():
    assert option_label(MaterialFactor("m3", "銅 (Copper)", 3.8)) == "銅 (Copper) (3.8 kgCO2e/kg)"
    assert option_label(MaterialFactor("x", "Glass", 2.0, "kgCO2e", "kg")) == "Glass (2 kgCO2e/kg)"


def test_filter_is_case_insensitive_substring():
    names = [o.id for o in filter_options(INITIAL_MATERIAL_DB, "STEEL")]
    assert names == ["m2"]


def test_filter_matches_factor_in_label():
    assert [o.id for o in filter_options(INITIAL_MATERIAL_DB, "6.7")] == ["m1"]


def test_empty_search_returns_everything():
    assert filter_options(INITIAL_MATERIAL_DB, "") == list(INITIAL_MATERIAL_DB)
    assert filter_options(INITIAL_MATERIAL_DB, None) == list(INITIAL_MATERIAL_DB)


def test_no_match():
    assert filter_options(INITIAL_MATERIAL_DB, "titanium") == []


def test_find_option():
    assert find_option(INITIAL_MATERIAL_DB, "m3").factor == 3.8
    assert find_option(INITIAL_MATERIAL_DB, "nope") is None
    assert find_option(INITIAL_MATERIAL_DB, "") is None
