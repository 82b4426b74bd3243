"""Schemas: Pydantic request/response models for API boundaries."""
