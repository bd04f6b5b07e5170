"""Normalization of raw cloud API payloads into service models."""

from .resource_normalizer import ResourceNormalizer

__all__ = ["ResourceNormalizer"]
