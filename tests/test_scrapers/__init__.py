"""Fetching, document and extractor tests."""
