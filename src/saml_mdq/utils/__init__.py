"""Shared utilities: exception taxonomy and error categorisation."""
