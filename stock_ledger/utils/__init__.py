"""Utility helpers for the stock ledger API."""
