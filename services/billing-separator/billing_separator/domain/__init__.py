"""Quarantine and release state machines and their collaborator contracts."""
