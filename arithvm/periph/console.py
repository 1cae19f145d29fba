"""
Arithmetic Machine — PRINT Output Sink

PRINT pops a value and hands its text form to the sink, one call per
opcode. The sink keeps every line for programmatic inspection and can
optionally forward each line to an echo callable (the CLI uses this to
write to stdout). There is no backpressure: write() never fails the run.
"""

import math
from typing import Callable, List, Optional


def format_value(value: float) -> str:
    """Fixed-point, 6 fractional digits ('%f')."""
    if math.isnan(value):
        return 'nan'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    return '%f' % value


class ConsoleSink:
    """Collects PRINT output.

    Usage:
        sink = ConsoleSink(echo=print)
        vm = ArithVM(code, sink=sink)
        vm.run()
        sink.lines  # ['1.000000']
    """

    def __init__(self, echo: Optional[Callable[[str], None]] = None):
        self.echo = echo
        self.lines: List[str] = []

    def write(self, text: str):
        self.lines.append(text)
        if self.echo is not None:
            self.echo(text)

    def emit(self, value: float):
        """Format and write one printed value."""
        self.write(format_value(value))

    @property
    def output(self) -> str:
        return ''.join(line + '\n' for line in self.lines)

    def clear(self):
        self.lines.clear()
