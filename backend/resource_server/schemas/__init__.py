"""
Schemas Package

Pydantic request/response models for the concert API.
"""
