#!/usr/bin/env python3
"""
Main entry point for running the load generator CLI as a module.

Usage:
    python3 -m pagbench run --host http://localhost:80 --mode labeled
    python3 -m pagbench render --seed 7
    python3 -m pagbench info
"""

from .cli import main

if __name__ == "__main__":
    main()
