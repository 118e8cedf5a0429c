#!/usr/bin/env python3
"""
ZX81 emulator launcher.

Runs :func:`zx81emu.main.main` straight from a source checkout::

    python main.py zx81.rom --engine mypackage.z80:Z80Engine
"""

from __future__ import annotations

import os
import sys

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so that ``zx81emu`` can be imported
# regardless of how the script is invoked.
# ---------------------------------------------------------------------------
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from zx81emu.main import main


if __name__ == "__main__":
    sys.exit(main())
