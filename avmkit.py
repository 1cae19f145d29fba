#!/usr/bin/env python3
"""
avmkit — Arithmetic Machine Toolkit
===================================

Commands:
    avmkit run      — Execute a bytecode file or a built-in sample
    avmkit disasm   — List the instructions in a bytecode file
    avmkit samples  — Show the built-in sample programs

Usage:
    python avmkit.py <command> [options]
    python avmkit.py <command> --help

Examples:
    python avmkit.py run --sample fibonacci
    python avmkit.py run prog.bin --max-steps 100000 --trace
    python avmkit.py disasm --sample readme

Exit status: 0 when the program halts, 1 on a VM fault or step limit,
2 on usage or file errors.
"""

import argparse
import logging
import sys
from pathlib import Path

from arithvm import ArithVM, ConsoleSink, StopReason, __version__, format_listing
from arithvm.log_setup import setup_logging
from arithvm.mem.stack import STACK_SIZE
from arithvm.programs import SAMPLES

log = logging.getLogger("arithvm.cli")


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...) or decimal."""
    value = value.strip()
    if value.lower().startswith("0x"):
        return int(value, 16)
    return int(value)


def parse_step_count(value: str) -> int:
    """argparse type for --max-steps: a non-negative integer."""
    try:
        count = parse_int_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid step count: {value!r}") from None
    if count < 0:
        raise argparse.ArgumentTypeError(f"step count must be >= 0, got {count}")
    return count


def _load_code(args) -> bytes:
    if args.sample:
        return SAMPLES[args.sample]
    path = Path(args.file)
    log.debug("Reading bytecode from %s", path)
    return path.read_bytes()


def _add_source_args(p: argparse.ArgumentParser):
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("file", nargs="?", help="Raw bytecode file")
    src.add_argument("--sample", choices=sorted(SAMPLES),
                     help="Use a built-in sample program")


def cmd_run(args) -> int:
    code = _load_code(args)
    sink = ConsoleSink(echo=print)
    with ArithVM(code, stack_size=args.stack_size, sink=sink) as vm:
        if args.trace:
            vm.enable_trace()
        result = vm.run(max_steps=args.max_steps)
        if args.trace:
            print(vm.get_trace(), file=sys.stderr)
        if args.verbose:
            print(f"[avmkit] {result} after {vm.regs.steps} steps, "
                  f"stack depth {vm.stack.depth}", file=sys.stderr)

    if result.reason is not StopReason.HALT:
        print(str(result), file=sys.stderr)
    return result.exit_status


def cmd_disasm(args) -> int:
    listing = format_listing(_load_code(args))
    if listing:
        print(listing)
    return 0


def cmd_samples(args) -> int:
    for name in sorted(SAMPLES):
        print(f"{name:12s} {len(SAMPLES[name]):4d} bytes")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="avmkit",
        description="Arithmetic Machine toolkit — run and list bytecode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version",
                        version=f"avmkit {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging and a run summary on stderr")
    parser.add_argument("--log-file", help="Also write DEBUG logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Execute bytecode")
    _add_source_args(p_run)
    p_run.add_argument("--max-steps", type=parse_step_count,
                       default=ArithVM.DEFAULT_MAX_STEPS,
                       help="Stop with StepLimit after this many instructions")
    p_run.add_argument("--stack-size", type=parse_int_arg, default=STACK_SIZE,
                       help=f"Operand stack capacity (default: {STACK_SIZE})")
    p_run.add_argument("--trace", action="store_true",
                       help="Print an instruction trace to stderr")
    p_run.set_defaults(func=cmd_run)

    p_dis = sub.add_parser("disasm", help="List instructions")
    _add_source_args(p_dis)
    p_dis.set_defaults(func=cmd_disasm)

    p_samples = sub.add_parser("samples", help="List built-in samples")
    p_samples.set_defaults(func=cmd_samples)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING,
                  log_file=args.log_file)

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
