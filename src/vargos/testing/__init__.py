"""Testing utilities for vargos."""

from .embedding_utils import hash_to_embedding

__all__ = ["hash_to_embedding"]
