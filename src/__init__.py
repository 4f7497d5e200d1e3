"""
Budget Tracker - Source Package

A personal finance tracker: users sign in, pick a preferred currency,
record income and expense transactions against their own categories,
and review aggregated overviews.

DESIGN PRINCIPLES:
1. Validate at the boundary, reject loudly
2. Every write is scoped to the signed-in identity
3. Writes signal staleness, readers recompute
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
