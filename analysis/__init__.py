"""Hybrid ranking of catalog search hits."""
