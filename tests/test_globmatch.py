import pytest

from pdpunix.globmatch import build_argv, expand, has_magic, match


@pytest.mark.parametrize(
    "name,pattern,expected",
    [
        ("abc", "a*", True),
        ("abc", "a?c", True),
        ("abc", "a?", False),
        ("bx", "[a-c]x", True),
        ("dx", "[a-c]x", False),
        ("zx", "[xyz]x", True),
        (".x", "*", False),
        (".x", ".*", True),
        ("abc", "abc", True),
        ("abc", "*d", False),
    ],
)
def test_match(name, pattern, expected):
    assert match(name, pattern) is expected


def test_has_magic():
    assert has_magic("*.c")
    assert not has_magic("plain")


@pytest.fixture
def tree(tmp_path):
    for name in ("b.c", "a.c", "d.h"):
        (tmp_path / name).write_text("")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "x.c").write_text("")
    return tmp_path


def test_expand_sorted(tree):
    assert expand("*.c", str(tree)) == ["a.c", "b.c"]


def test_expand_with_prefix(tree):
    assert expand(f"{tree}/*.h") == [f"{tree}/d.h"]
    assert expand("sub/*.c", str(tree)) == ["sub/x.c"]


def test_build_argv(tree):
    assert build_argv(["echo", "*.c", "z"], str(tree)) == ["echo", "a.c", "b.c", "z"]


def test_build_argv_no_match(tree):
    with pytest.raises(ValueError):
        build_argv(["q*"], str(tree))