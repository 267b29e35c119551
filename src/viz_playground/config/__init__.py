"""
Configuration package.
Exposes the process-wide settings instance.
"""
from .settings import settings

__all__ = ["settings"]
