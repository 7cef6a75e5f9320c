"""HTTP surface and search pipeline."""
