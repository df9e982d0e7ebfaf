"""Core components for ZettelKB: address algebra, note stores, factories."""
