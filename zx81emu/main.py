"""
ZX81 emulator -- command-line entry point.

Loads the 8 KB system ROM, plugs in an external Z80 execution engine and
opens the pygame display window.

Usage examples::

    # Run with an engine class importable as mypackage.z80:Z80Engine
    zx81emu zx81.rom --engine mypackage.z80:Z80Engine

    # Bigger window, fewer instructions per frame
    zx81emu zx81.rom -e mypackage.z80:Z80Engine --scale 2 --slice 50000

    # Show ROM metadata without launching
    zx81emu zx81.rom --info

    # Run a few frames headless and print the screen as text
    zx81emu zx81.rom -e mypackage.z80:Z80Engine --debug
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from zx81emu.core.display_file import decode_text
from zx81emu.core.machine import ZX81Machine
from zx81emu.shell.services.machine_factory import MachineFactory


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

_DEBUG_FRAMES: int = 5


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="zx81emu",
        description=(
            "ZX81 emulator.  Load the system ROM, attach a Z80 execution "
            "engine and run it in a pygame window."
        ),
    )

    parser.add_argument(
        "rom",
        help="Path to the 8 KB ZX81 ROM image",
    )

    parser.add_argument(
        "--engine", "-e",
        default=None,
        metavar="MODULE:CLASS",
        help=(
            "Z80 execution engine to use, as an importable "
            "'package.module:ClassName' reference.  Required unless --info."
        ),
    )

    parser.add_argument(
        "--slice", "-n",
        type=int,
        default=ZX81Machine.DEFAULT_INSTRUCTIONS_PER_SLICE,
        metavar="N",
        help=(
            "Instructions executed per frame.  Lower values slow the "
            "emulation down, higher values make the keyboard less "
            "responsive.  Default: %(default)s."
        ),
    )

    # Display
    parser.add_argument(
        "--scale", "-s",
        type=int,
        default=1,
        help="Display scale factor (1-4).  Default: 1.",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=0,
        help="Frame-rate cap; 0 runs unthrottled.  Default: 0.",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print ROM metadata and exit without launching the emulator.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help=f"Run {_DEBUG_FRAMES} frames without a window, print the screen and exit.",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info mode
# ---------------------------------------------------------------------------

def _print_rom_info(rom_path: str) -> int:
    """Print human-readable metadata for a ROM."""
    try:
        info = MachineFactory.describe(rom_path)
    except OSError as exc:
        print(f"Error reading ROM: {exc}", file=sys.stderr)
        return 1

    print("ZX81 ROM Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("=" * 40)
    return 0


# ---------------------------------------------------------------------------
# Debug mode
# ---------------------------------------------------------------------------

def _run_debug(machine: ZX81Machine) -> int:
    """Run a few frames headless and print the decoded display file."""
    print("=" * 60)
    print("ZX81 Debug Diagnostics")
    print("=" * 60)
    print(f"Machine: {machine}")

    for _ in range(_DEBUG_FRAMES):
        machine.run_slice()

    print(f"Frames: {machine.frame_number}  Instructions: {machine.instruction_count}")
    print(f"D_FILE: ${machine.memory.display_file_address():04X}")
    print(f"Keyboard: {machine.keyboard!r}")
    print("+" + "-" * 32 + "+")
    for line in decode_text(machine.memory):
        print(f"|{line}|")
    print("+" + "-" * 32 + "+")
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("zx81emu.main")

    # Validate the ROM path early.
    rom_path: str = os.path.expanduser(args.rom)
    if not os.path.isfile(rom_path):
        print(f"Error: ROM file not found: {rom_path}", file=sys.stderr)
        return 1

    # Info-only mode.
    if args.info:
        return _print_rom_info(rom_path)

    if args.engine is None:
        print("Error: no execution engine given (use --engine MODULE:CLASS)", file=sys.stderr)
        return 1

    # Create the emulated machine.
    try:
        machine = MachineFactory.create(
            rom_path=rom_path,
            engine=args.engine,
            instructions_per_slice=args.slice,
        )
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("Failed to create machine")
        print(f"Error creating machine: {exc}", file=sys.stderr)
        return 1

    # Debug mode: run a few frames and print diagnostics.
    if args.debug:
        return _run_debug(machine)

    # Launch the window.
    logger.info("Starting emulation ...")
    import pygame

    from zx81emu.platform.window import Window

    try:
        window = Window(machine, scale=args.scale, max_fps=args.fps)
    except Exception as exc:
        logger.exception("Unable to set up the display")
        pygame.quit()
        print(f"Error: unable to set up the display: {exc}", file=sys.stderr)
        return 1

    try:
        window.run()
    except Exception as exc:
        logger.exception("Fatal error during emulation")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
