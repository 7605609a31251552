#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/utils/__init__.py
"""Shared helpers used across the compiler."""
