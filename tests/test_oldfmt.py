import pytest

from pdpunix.oldfmt import format_number, oldformat


def test_most_negative():
    assert oldformat("%d", -32768) == "-32768"
    assert oldformat("%o", -32768) == "100000"


@pytest.mark.parametrize("n", [0, 7, 8, 511, 32767])
def test_octal_round_trip(n):
    assert int(oldformat("%o", n), 8) == n
    assert int(format_number(n, 10)) == n


def test_negative_decimal():
    assert int(oldformat("%d", -42)) == -42


def test_char_and_string():
    assert oldformat("%c%s!", 65, "bc") == "Abc!"


def test_unknown_conversion_keeps_argument():
    assert oldformat("%q%d", 5) == "%q5"


def test_format_number_rejects_negative():
    with pytest.raises(ValueError):
        format_number(-1, 10)