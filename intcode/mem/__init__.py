"""Intcode memory model."""
