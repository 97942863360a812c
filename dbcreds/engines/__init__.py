"""Issuance engines."""
