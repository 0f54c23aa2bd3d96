#!/usr/bin/env python3

"""
Entry point for running qmk_toolbox as a module.

Usage:
    python -m qmk_toolbox [args]
"""

from .cli import run_as_module

if __name__ == "__main__":
    run_as_module()
