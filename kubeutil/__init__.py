"""Small utilities: field paths, env lookups, a ring buffer, clocks, file reads, diffs, keyed locks and exec."""

__version__ = "0.1.0"