#!/usr/bin/env python3
"""
CLI entry point for vidpod.cli module.

This allows running: python -m vidpod.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
