#!/usr/bin/env python3
"""Copy images into randomly filled, numbered folders.

Example usage::

    python scripts/split_images_into_folders.py \
        --src ~/Pictures/theframe --dst ~/Pictures/display --seed 42

or with the settings kept in a YAML file::

    python scripts/split_images_into_folders.py --config configs/distribute.yaml
"""

from __future__ import annotations

import sys

from image_rando.cli import main


if __name__ == "__main__":
    sys.exit(main())
