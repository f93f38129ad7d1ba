"""Adapters connecting the core to HTTP, files and output streams."""
