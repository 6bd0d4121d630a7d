#!/usr/bin/env python
"""
Run vaultgraph from a source checkout without installing it.

Usage:
    python run.py --demo
    python run.py PATH [--positions]
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from vaultgraph_app.__main__ import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
