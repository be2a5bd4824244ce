"""Ranking — composite engagement + recency scoring."""
