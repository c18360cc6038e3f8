"""Diagnostic context and layouts shared by every sink."""
