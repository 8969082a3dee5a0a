"""
SBNZ SDK Command-Line Interface
===============================

This package provides the `sbnz` command-line tool:

- **sbnz run**: Load a binary image and execute it
- **sbnz demo**: Assemble and run the built-in multiplication program

The tool is implemented as a Click-based CLI application with
consistent error reporting (see errors.py).

Copyright (c) 2025 SBNZ SDK Contributors
"""

__all__ = ["sbnz"]
