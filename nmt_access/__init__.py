"""Hierarchical access control and trip lifecycle core for NMT scheduling."""
