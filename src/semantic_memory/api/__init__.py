"""Caller-facing command line surface."""
