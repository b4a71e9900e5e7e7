"""
Personal Finance Tracker - Source Package

A small personal finance tracker: income/expense transactions,
user-defined categories and monthly per-category budgets.

DESIGN PRINCIPLES:
1. The in-memory session state is the source of truth while running
2. Storage is a durable mirror with a silent local fallback
3. Derived figures are recomputed from scratch, never patched
4. Business rules are checked before any storage call
5. Storage backends are swappable behind one interface
"""

__version__ = "1.0.0"
__author__ = "Personal Finance Tracker Team"
