"""Allows running ffbuild with python -m ffbuild"""
import sys

from .main import main

sys.exit(main())
