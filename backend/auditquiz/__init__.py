"""Audit Quiz Platform."""
