"""Digest rendering and delivery."""
