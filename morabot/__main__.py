# -*- coding: utf-8 -*-
"""Точка входа: python -m morabot"""

import sys

from .bootstrap.runtime import main

if __name__ == "__main__":
    sys.exit(main())
