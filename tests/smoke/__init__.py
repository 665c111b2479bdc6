"""Smoke tests - fast end-to-end checks of the default scheduler and examples."""
