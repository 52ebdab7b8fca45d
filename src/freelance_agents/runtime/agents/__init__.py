"""Decision rules for the five agent domains."""

from . import cfo, collections, dedup, hunter, productivity, tax

__all__ = ["cfo", "collections", "dedup", "hunter", "productivity", "tax"]
