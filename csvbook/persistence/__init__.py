"""Persist in-memory workbooks into a chosen directory."""
