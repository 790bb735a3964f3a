"""Utility helpers for sheetbind."""
