"""ZX81 emulator: memory bus, keyboard matrix and video shell around an external Z80 engine."""

__version__ = "1.0.0"
