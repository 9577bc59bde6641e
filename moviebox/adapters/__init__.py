"""Adaptateurs techniques (cache)."""
