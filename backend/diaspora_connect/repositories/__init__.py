"""Repositories: Firestore CRUD, one module per group of collections.

Invariants:
    - Documents use camelCase field names (shared with the web client)
    - Every write goes through FirestoreManager.translate_errors-style mapping
"""
