"""Utility helpers for moku-pona."""
