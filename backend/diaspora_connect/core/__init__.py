"""Core Layer: pure domain logic, no IO, no async, no vendor SDKs.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or repositories/
    - All functions are pure and deterministic (except referral code generation)
"""
