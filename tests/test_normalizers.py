import math

import pytest

from ledger.parsing.amounts import InvalidAmount, normalize_amount
from ledger.parsing.categories import (
    CANONICAL_CATEGORIES,
    CATEGORY_SYNONYMS,
    find_category_in_text,
    is_canonical,
    normalize_category,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.234,56", 1234.56),
        ("12,9", 12.9),
        ("29.90", 29.9),
        ("R$ 15,00", 15.0),
        (" 7 ", 7.0),
        ("12.345.678,90", 12345678.90),
        ("-3,5", -3.5),
        (42, 42.0),
        (9.99, 9.99),
    ],
)
def test_normalize_amount(raw, expected):
    assert math.isclose(normalize_amount(raw), expected)


@pytest.mark.parametrize("raw", ["abc", "", None, "inf", "nan", "12,3,4", True])
def test_normalize_amount_rejects(raw):
    with pytest.raises(InvalidAmount):
        normalize_amount(raw)


def test_invalid_amount_is_a_value_error():
    assert issubclass(InvalidAmount, ValueError)


def test_every_synonym_maps_to_its_canonical_category():
    for token, canonical in CATEGORY_SYNONYMS.items():
        assert normalize_category(token) == canonical, token
        assert is_canonical(canonical)


@pytest.mark.parametrize("raw", ["padaria", "", None, "   ", "xyz123"])
def test_unmapped_category_falls_back_to_diversos(raw):
    assert normalize_category(raw) == "Diversos"


def test_normalize_category_ignores_case_and_accents():
    assert normalize_category("  CACHAÇA ") == "Bebidas alcoólicas"
    assert normalize_category("Farmacia") == "saude/farmacia"
    assert normalize_category("Remedios") == "saude/farmacia"


def test_canonical_names_map_to_themselves():
    for name in CANONICAL_CATEGORIES:
        assert normalize_category(name) == name
        assert normalize_category(name.upper()) == name


def test_find_category_prefers_the_longest_synonym():
    # "game pass" must win over any shorter key, "red bull" over nothing
    assert find_category_in_text("assinei o game pass hoje") == "Jogos"
    assert find_category_in_text("listar gastos de red bull") == "Energeticos"


def test_find_category_matches_whole_words_only():
    assert find_category_in_text("listar gastos de supermercado") == "mercado"
    assert find_category_in_text("quanto gastei com uberaba") is None


def test_find_category_returns_none_without_mention():
    assert find_category_in_text("listar gastos") is None
    assert find_category_in_text("") is None


def test_find_category_handles_accents():
    assert find_category_in_text("gastos com energéticos") == "Energeticos"
    assert find_category_in_text("gastos de farmácia do mês passado") == "saude/farmacia"
