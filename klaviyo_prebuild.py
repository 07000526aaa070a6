#!/usr/bin/env python3
"""
Source-checkout entrypoint.

Allows running the tool without installing it:
  python3 klaviyo_prebuild.py --project-root path/to/app ...
"""

import os
import sys

_HERE = os.path.dirname(os.path.abspath(__file__))
_SRC = os.path.join(_HERE, "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

# Importing this file as `klaviyo_prebuild` must still resolve submodules from
# `src/klaviyo_prebuild/`.
__path__ = [os.path.join(_SRC, "klaviyo_prebuild")]


def main(argv: list[str] | None = None) -> int:
    from klaviyo_prebuild.cli import main as _main

    return _main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
