#!/usr/bin/env python3
"""
symkernel entry point.

Usage: python symkernel.py [input] [-e EXPRESSION] [--tokens] [--parse]
"""

from symkernel.cli import main

if __name__ == '__main__':
    main()
