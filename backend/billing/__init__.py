"""Billing backend: gap-filling document numbering."""
