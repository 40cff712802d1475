"""Run orchestration, progress display and summary rendering."""
