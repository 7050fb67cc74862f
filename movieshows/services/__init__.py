"""Catalog loading, browsing and playback state services."""
