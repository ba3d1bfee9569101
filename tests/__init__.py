"""
Test Suite

Unit and integration tests for the job parsing pipeline.
"""
