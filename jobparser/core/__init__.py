"""Core configuration, exceptions and pipeline wiring."""
