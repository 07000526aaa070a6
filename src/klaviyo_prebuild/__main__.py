"""
`python -m klaviyo_prebuild` entrypoint.

The installed console script `klaviyo-prebuild` calls the same
`klaviyo_prebuild.cli:main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
