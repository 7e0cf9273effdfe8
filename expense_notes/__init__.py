"""
Expense Notes - Source Package

A personal expense tracker built around a small local record store.

DESIGN PRINCIPLES:
1. The store is the single owner of the expense collection
2. Every mutation is persisted before control returns
3. Persistence backend is swappable (memory, local file, Google Sheets)
4. Imports never duplicate an existing title
5. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Expense Notes Team"
