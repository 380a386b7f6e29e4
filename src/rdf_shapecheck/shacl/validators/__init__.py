"""Constraint validator families and their dispatch table."""
