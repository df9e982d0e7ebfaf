"""
ZettelKB - a Zettelkasten knowledge base with Luhmann-style addresses.

Notes live at hierarchical addresses (1, 1a, 1a1, ...) that are allocated
race-free, so several agents can grow the same tree concurrently.
"""

__version__ = "0.1.0"
