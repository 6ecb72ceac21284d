"""Intcode I/O channels."""
