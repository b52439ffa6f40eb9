import pytest

from pdpunix.copyfile import copy, main


def test_copy_to_file(tmp_path):
    old = tmp_path / "a"
    payload = bytes(range(256)) * 5
    old.write_bytes(payload)
    assert copy(str(old), str(tmp_path / "b")) == len(payload)
    assert (tmp_path / "b").read_bytes() == payload


def test_copy_into_directory(tmp_path):
    old = tmp_path / "a"
    old.write_bytes(b"data")
    d = tmp_path / "dir"
    d.mkdir()
    copy(str(old), str(d))
    assert (d / "a").read_bytes() == b"data"


def test_missing_old(tmp_path):
    with pytest.raises(OSError) as info:
        copy(str(tmp_path / "none"), str(tmp_path / "b"))
    assert info.value.strerror == "Cannot open old file."


def test_main_usage(capsys):
    assert main(["one"]) == 1
    assert capsys.readouterr().out == "Usage: cp oldfile newfile\n"