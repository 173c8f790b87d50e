"""Audit Quiz Platform - API package."""
