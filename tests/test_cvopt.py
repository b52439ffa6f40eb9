import pytest

from pdpunix.cvopt import convert


def test_empty_input():
    assert convert("") == ".text; 0\n"


def test_label_outside_string_mode():
    assert convert("x:") == "x=.+2; 0" + ".text; 0\n"


def test_address_letters():
    assert convert("A1 A2 A") == "A B O.text; 0\n"


def test_braces_removed_or_dropped():
    assert convert("a{b}c") == convert("abc")
    assert convert("a{b}c", nofloat=True) == convert("ac")


def test_percent_then_eof_is_error():
    with pytest.raises(ValueError):
        convert("%z")


def test_table_entry_enters_string_mode():
    result = convert("%z\nabc\n\n")
    assert result.endswith("\\0>\n.text\n.text; 0\n")
    assert ".data\n1:<" in result