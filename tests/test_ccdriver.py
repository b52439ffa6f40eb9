from pathlib import Path

import pytest

from pdpunix.ccdriver import (
    CompileError,
    expand_includes,
    object_name,
    plan_cc,
    run_cc,
    source_suffix,
)


def make_runner(fail=(), produce=True):
    calls = []

    def runner(program, argv):
        calls.append((program, list(argv)))
        if program in fail:
            return 1
        if program == "/bin/as" and produce:
            Path("a.out").write_bytes(b"obj")
        return 0

    return calls, runner


@pytest.mark.parametrize(
    "name,expected",
    [("x.c", True), ("prog.c", True), ("dir/a.c", True), (".c", False),
     ("toolong12.c", False), ("prog.o", False), ("abc", False)],
)
def test_source_suffix(name, expected):
    assert source_suffix(name, "c") is expected


def test_source_suffix_other_letter():
    assert source_suffix("a.f", "f")
    assert not source_suffix("a.f", "c")


def test_object_name():
    assert object_name("prog.c") == "prog.o"
    with pytest.raises(ValueError):
        object_name("")


def test_expand_without_percent_returns_source(tmp_path):
    src = tmp_path / "a.c"
    src.write_text("int x;\n")
    out = tmp_path / "out"
    assert expand_includes(str(src), str(out)) == str(src)
    assert not out.exists()


def test_expand_missing_source_returns_source(tmp_path):
    missing = str(tmp_path / "none.c")
    assert expand_includes(missing, str(tmp_path / "out")) == missing


def test_expand_includes_marks_lines(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("hdr.h").write_bytes(b"a\nb\n")
    Path("m.c").write_bytes(b"% hdr.h\nint x;\n")
    assert expand_includes("m.c", "out") == "out"
    assert Path("out").read_bytes() == b"\x01a\n\x01b\n\n" + b"int x;\n"


def test_expand_empty_header_line_becomes_newline(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("m.c").write_bytes(b"%\nint y;\n")
    assert expand_includes("m.c", "out") == "out"
    assert Path("out").read_bytes() == b"\nint y;\n"


def test_expand_missing_include(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("m.c").write_bytes(b"%nothere.h\n")
    with pytest.raises(CompileError, match="Missing file nothere.h"):
        expand_includes("m.c", "out")


def test_plan_sorts_arguments():
    plan = plan_cc(["-c", "a.c", "b.o", "a.c"])
    assert plan.compile_only
    assert plan.sources == ["a.c", "a.c"]
    assert plan.objects == ["a.o", "b.o"]
    assert plan.crt0 == "/lib/crt0.o"


def test_plan_f20_and_unknown_option():
    plan = plan_cc(["-2", "-x", "a.c"])
    assert plan.f20
    assert plan.crt0 == "/lib/crt20.o"
    assert plan.objects == ["-x", "a.o"]


def test_run_compiles_and_links(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    Path("prog.c").write_text("main(){}\n")
    calls, runner = make_runner()
    assert run_cc(["prog.c"], runner) == 0
    assert [p for p, _ in calls] == ["/lib/c0", "/lib/c1", "/bin/as", "/bin/ld"]
    assert calls[0][1][:2] == ["c0", "prog.c"]
    assert calls[3][1] == ["ld", "/lib/crt0.o", "prog.o", "/lib/libc.a", "-l"]
    assert not Path("prog.o").exists()


def test_compile_only_keeps_object(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls, runner = make_runner()
    assert run_cc(["-c", "prog.c"], runner) == 0
    assert "/bin/ld" not in [p for p, _ in calls]
    assert Path("prog.o").read_bytes() == b"obj"


def test_failed_pass_blocks_link(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls, runner = make_runner(fail=("/lib/c0",))
    assert run_cc(["prog.c"], runner) == 1
    assert [p for p, _ in calls] == ["/lib/c0"]


def test_f20_uses_other_tools(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls, runner = make_runner()
    assert run_cc(["-2", "a.c", "b.o"], runner) == 0
    as_call = next(argv for p, argv in calls if p == "/bin/as")
    assert as_call[2] == "/lib/20.s"
    program, argv = calls[-1]
    assert program == "/usr/lib/ld20"
    assert argv == ["ld", "/lib/crt20.o", "a.o", "b.o", "-l2"]


def test_move_failure(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    calls, runner = make_runner(produce=False)
    assert run_cc(["prog.c"], runner) == 1
    assert "move failed: prog.o" in capsys.readouterr().out
    assert "/bin/ld" not in [p for p, _ in calls]


def test_missing_include_skips_compiler(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    Path("m.c").write_bytes(b"%gone.h\n")
    calls, runner = make_runner()
    assert run_cc(["m.c"], runner) == 1
    assert calls == []
    assert "Missing file gone.h" in capsys.readouterr().out


def test_several_sources_are_named(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    _, runner = make_runner()
    run_cc(["-c", "a.c", "b.c"], runner)
    out = capsys.readouterr().out
    assert "a.c:\n" in out and "b.c:\n" in out