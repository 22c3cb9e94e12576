"""Quarantine hold for reclaimed sandbox accounts."""
