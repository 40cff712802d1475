"""Logging setup and structured error log for conversion runs."""
