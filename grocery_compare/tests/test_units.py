import pytest

from grocery_compare.units import parse_quantity, parse_unit


@pytest.mark.parametrize(
    "text, quantity, unit, label",
    [
        ("Aceite Girasol Natura 1,5 L", 1500.0, "ml", "1.5L"),
        ("Queso Cremoso 500 Gr.", 500.0, "g", "500g"),
        ("Harina 000 1kg", 1000.0, "g", "1kg"),
        ("Leche Entera 1 litro", 1000.0, "ml", "1L"),
        ("Crema de Leche 200 cc", 200.0, "ml", "200ml"),
        ("Gaseosa Cola 2.25lts", 2250.0, "ml", "2.25L"),
    ],
)
def test_parse_unit(text, quantity, unit, label):
    info = parse_unit(text)
    assert info is not None
    assert info.quantity == pytest.approx(quantity)
    assert info.unit == unit
    assert info.label == label


def test_kg_wins_over_g():
    assert parse_unit("Papas 2 kg").unit == "g"
    assert parse_unit("Papas 2 kg").quantity == 2000.0


def test_zero_quantity_skipped():
    info = parse_unit("Arroz 0kg 500g")
    assert info.quantity == 500.0
    assert info.label == "500g"


def test_counts_not_recognized():
    assert parse_unit("Huevos x 12 un") is None
    assert parse_unit("Servilletas 50u") is None


def test_no_unit():
    assert parse_unit("Tomate Perita") is None
    assert parse_unit("") is None
    assert parse_unit(None) is None


def test_parse_quantity():
    assert parse_quantity("1,5") == 1.5
    assert parse_quantity("2") == 2.0
    assert parse_quantity("abc") is None
