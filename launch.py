#!/usr/bin/env python3
"""
Sentinel Suite - Dragon Quest IX Save Editor

Standalone launcher for the editor window, runnable from a source checkout.

Usage:
    python launch.py [save file]
"""

import sys
from pathlib import Path

# Setup paths
root_dir = Path(__file__).parent
src_dir = root_dir / "src"
sys.path.insert(0, str(src_dir))

APP_NAME = "Sentinel Suite"


def show_splash(version: str):
    """Show splash screen info."""
    banner = f"""
+----------------------------------------------------------------+
|                                                                |
|   SENTINEL SUITE                                               |
|   Dragon Quest IX save editor                                  |
|   Version {version:<10}                                           |
|                                                                |
+----------------------------------------------------------------+
"""
    print(banner)


def check_dependencies():
    """Check that required dependencies are available."""
    missing = []

    try:
        import dearpygui
    except ImportError:
        missing.append("dearpygui")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    try:
        import PIL
    except ImportError:
        missing.append("Pillow")

    if missing:
        print("\nMissing dependencies:")
        for dep in missing:
            print(f"   - {dep}")
        print("\n   Install with: pip install -e .\n")
        return False

    return True


def main():
    """Launch the application."""
    from sentinel_suite import __version__

    show_splash(__version__)

    if not check_dependencies():
        return 1

    from sentinel_suite.main_app import main as run_app

    print("Starting application...")
    return run_app(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
