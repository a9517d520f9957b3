"""Data models for saved connection settings."""

from mpdwire.models.profile import ServerProfile, create_profile

__all__ = ["ServerProfile", "create_profile"]
