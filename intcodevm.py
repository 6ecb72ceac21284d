#!/usr/bin/env python3
"""
intcodevm — Intcode virtual machine CLI

Usage:
    python intcodevm.py run <program> [--input 1,2] [--patch ADDR=VALUE ...]
                                      [--peek ADDR ...] [--trace]
    python intcodevm.py amp <program> [--mode series|feedback] [--phases 5,6,7,8,9] [--fixed]
    python intcodevm.py search <program> --target N
    python intcodevm.py disasm <program>

<program> is a file of comma-separated integers, or '-' for stdin.
Addresses accept decimal, 0x-prefixed hex, or $-prefixed hex.

Examples:
    python intcodevm.py run day05.txt --input 5
    python intcodevm.py run day02.txt --patch 1=12 --patch 2=2 --peek 0
    python intcodevm.py amp day07.txt --mode feedback
    python intcodevm.py search day02.txt --target 19690720
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from intcode import __version__
from intcode.amplifier import max_thruster_signal, thruster_signal
from intcode.config import AMPLIFIER_PROFILES
from intcode.disasm import disassemble
from intcode.errors import IntcodeError
from intcode.log_setup import setup_logging, verbosity_to_level
from intcode.patching import find_noun_verb
from intcode.periph.channels import OutputBuffer
from intcode.program import Program

log = logging.getLogger("intcode.cli")


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def parse_values(value: str) -> List[int]:
    """Parse a comma-separated list of integers ('' → [])."""
    value = value.strip()
    if not value:
        return []
    try:
        return [int(v) for v in value.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a comma-separated integer list: {value!r}")


def parse_patch(value: str) -> Tuple[int, int]:
    """Parse ADDR=VALUE."""
    addr, sep, val = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ADDR=VALUE, got {value!r}")
    try:
        return parse_int_arg(addr), int(val)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected ADDR=VALUE, got {value!r}")


def parse_address(value: str) -> int:
    try:
        return parse_int_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an address: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcodevm",
        description="Intcode virtual machine",
        epilog="Amplifier modes: " + ", ".join(AMPLIFIER_PROFILES.keys()),
    )
    parser.add_argument("--version", action="version",
                        version=f"intcodevm {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-file", default=None,
                        help="Write a DEBUG log to this file")
    parser.add_argument("--no-color", action="store_true",
                        help="Plain console logging instead of rich")

    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Run a program and print its outputs")
    p_run.add_argument("program", help="Program file ('-' for stdin)")
    p_run.add_argument("--input", "-i", type=parse_values, default=[],
                       help="Comma-separated input values")
    p_run.add_argument("--patch", "-p", type=parse_patch, action="append", default=[],
                       help="Overwrite a memory cell before running (ADDR=VALUE)")
    p_run.add_argument("--peek", type=parse_address, action="append", default=[],
                       help="Print a memory cell after the program halts")
    p_run.add_argument("--trace", action="store_true",
                       help="Print an instruction trace to stderr")

    p_amp = sub.add_parser("amp", help="Maximise an amplifier chain's thruster signal")
    p_amp.add_argument("program", help="Program file ('-' for stdin)")
    p_amp.add_argument("--mode", choices=list(AMPLIFIER_PROFILES.keys()), default="series",
                       help="Chain topology (default: series)")
    p_amp.add_argument("--phases", type=parse_values, default=None,
                       help="Phase settings (default: from the mode profile)")
    p_amp.add_argument("--fixed", action="store_true",
                       help="Use --phases in the given order instead of searching")

    p_search = sub.add_parser("search", help="Find the noun/verb producing a target")
    p_search.add_argument("program", help="Program file ('-' for stdin)")
    p_search.add_argument("--target", type=int, required=True,
                          help="Value wanted in cell 0 after halt")

    p_dis = sub.add_parser("disasm", help="Print a disassembly listing")
    p_dis.add_argument("program", help="Program file ('-' for stdin)")

    return parser


def load_program(path: str) -> Program:
    if path == "-":
        return Program.parse(sys.stdin.read())
    return Program.from_file(path)


def cmd_run(args) -> int:
    prog = load_program(args.program)
    emu = prog.start().read_values(args.input).write_to(OutputBuffer())
    if args.trace:
        emu.enable_trace()

    try:
        for value in emu.run_with(args.patch):
            print(value)
    finally:
        if args.trace:
            print(emu.get_trace(), file=sys.stderr)

    for addr in args.peek:
        print(f"[{addr}] = {emu[addr]}")
    log.info("Halted after %d steps", emu.steps)
    return 0


def cmd_amp(args) -> int:
    prog = load_program(args.program)
    profile = AMPLIFIER_PROFILES[args.mode]
    phases = tuple(args.phases) if args.phases is not None else profile["phases"]

    if args.fixed:
        signal = thruster_signal(prog, phases, feedback=profile["feedback"])
        order = phases
    else:
        signal, order = max_thruster_signal(prog, phases, feedback=profile["feedback"])
    print(f"{signal} {','.join(str(p) for p in order)}")
    return 0


def cmd_search(args) -> int:
    prog = load_program(args.program)
    noun, verb = find_noun_verb(prog, args.target)
    print(100 * noun + verb)
    return 0


def cmd_disasm(args) -> int:
    prog = load_program(args.program)
    for line in disassemble(prog.code):
        print(line.format())
    return 0


COMMANDS = {
    "run": cmd_run,
    "amp": cmd_amp,
    "search": cmd_search,
    "disasm": cmd_disasm,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        console_level=verbosity_to_level(args.verbose, args.quiet),
        log_file=args.log_file,
        rich_console=not args.no_color,
    )

    try:
        return COMMANDS[args.command](args)
    except IntcodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, OverflowError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
