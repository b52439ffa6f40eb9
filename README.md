# pdpunix

Tools from the world of early PDP-11 UNIX as a plain Python package: models
of arithmetic hardware, an a.out loader, terminal and signal tables for an
emulated BSD system, and the small commands that shipped with the first
editions of the system. It needs nothing outside the standard library.

## What is inside

Hardware and CPU

- `pdpunix.ke11` – the `EAE` class, a model of the KE11-A extended arithmetic
  element of the PDP-11/20. Writing to its registers (`EAE.write`) performs
  divide, multiply, normalize and shifts, or loads AC, MQ and the step
  counter; `EAE.read` returns AC, MQ, the step counter and the status
  register; `EAE.update_status` recomputes the status bits; `EAE.reset`
  clears everything.
- `pdpunix.alu` – condition codes (`Flags`, an immutable dataclass) and
  instructions that are awkward to get right: branches (`branch_target`,
  `branch_taken`), `sob`, `mfps`, `set_flags`/`clear_flags`, `ash`, `ashc`,
  `mul`, `divide` and `xor`. Each returns its results and new flags.

Executables

- `pdpunix.aout` – reads the a.out header (`read_header`, `ExecHeader.parse`),
  tells which UNIX edition a binary belongs to (`identify`, `UnixVersion`,
  `Magic`), works out where text, data and bss go (`layout`,
  `MemoryLayout`), builds the initial argument and environment stack
  (`build_stack`) and loads a whole image into a 64K address space (`load`,
  which returns a `LoadedImage` with memory and registers). `#!` scripts load
  their interpreter; their first line is split with `parse_script_line`.
  Problems raise `AoutError`.
- `pdpunix.ttymodes` – conversions between old `sgtty` style terminal
  settings (`Sgttyb`, `Tchars`, `Ltchars`, request codes in `Ioctl`) and a
  termios-like `TermState`: `to_sgttyb`, `apply_sgttyb`, `to_tchars`,
  `to_ltchars`, `apply_tchars`, `apply_ltchars`, and the baud-rate codes
  `speed_code` and `code_speed`.
- `pdpunix.bsdsignal` – 2.11BSD signal numbers (`BsdSignal`), signal
  actions (`SigAction`), `mask_to_signals`, and a per-process `SignalTable`
  with `reset` and `sigaction`.

Commands and libraries

- `pdpunix.globmatch` – `*`, `?` and `[a-z]` matching (`match`, `has_magic`,
  `expand`, `build_argv`); its command expands the arguments and runs the
  command they name.
- `pdpunix.ifexpr` – the `if` command's expression language (`evaluate`,
  with `IfError` for malformed expressions): `-r`, `-w`, `-c`, `=`, `!=`,
  `!`, `-a`, `-o` and parentheses.
- `pdpunix.copyfile` – `copy`, including copying into a directory.
- `pdpunix.hyphen` – finds words hyphenated across line ends
  (`hyphenated_words`).
- `pdpunix.oldfmt` – an early-style `printf` with `%d`, `%o`, `%c` and `%s`
  on 16-bit integers (`oldformat`, `format_number`).
- `pdpunix.cvopt` – converts compiler code-table sources into assembler
  data statements (`convert`).
- `pdpunix.ccdriver` and `pdpunix.fcdriver` – the `cc` and `fc` command
  drivers: they decide which passes to run (`plan_cc`, `plan_fc`) and run
  them (`run_cc`, `run_fc`, each taking an optional runner). `expand_includes`
  handles the `%` header lines of early C sources; failures raise
  `CompileError`.

## Installing

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## Commands

Installing the package gives these commands:

    pdp-glob ls '*.c'          # expand patterns, then run the command
    pdp-if -r notes.txt ls -l  # run a command when a condition holds
    pdp-cp old new             # copy a file
    pdp-hyphen text.txt        # list words hyphenated at line ends
    pdp-cvopt < table.s        # convert a code table from standard input
    pdp-cc -c prog.c           # drive the C compiler passes
    pdp-fc prog.f              # drive the Fortran compiler passes

`pdp-cc` and `pdp-fc` start the compiler, assembler and loader programs at
the paths the old system used (`/lib/c0`, `/lib/c1`, `/bin/as`, `/bin/ld`,
`/usr/fort/fc1`), so they only do useful work where those programs exist.

## Using the library

    from pdpunix.ke11 import EAE

    eae = EAE()
    eae.write(0o4, 6, False)    # load MQ
    eae.write(0o6, 7, False)    # multiply
    product = eae.read(0o4)     # 42

    from pdpunix.globmatch import match

    match("main.c", "*.c")      # True

## What it does not do

- It does not execute PDP-11 programs. `load` prepares memory and registers,
  and `alu` covers a handful of instructions, but there is no instruction
  loop and no system-call handling.
- `ttymodes` and `bsdsignal` only convert and record settings; they do not
  change the host terminal or install host signal handlers themselves.
- There are no shell-script `goto` or `exit` commands.