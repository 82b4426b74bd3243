"""Diaspora Connect API: membership, donation and engagement backend.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
