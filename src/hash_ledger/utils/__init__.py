"""Utility helpers: exceptions and document hashing."""
