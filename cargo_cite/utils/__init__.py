"""Filesystem and subprocess helpers."""
