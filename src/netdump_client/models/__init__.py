"""Data models for decoded payloads."""

from .disc import DiscInfo, DiscType
