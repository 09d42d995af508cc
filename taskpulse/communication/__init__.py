"""Email/chat activity tracking."""

from .manager import CommunicationManager, KNOWN_SERVICES

__all__ = ["CommunicationManager", "KNOWN_SERVICES"]
