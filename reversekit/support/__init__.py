"""Naming, type-inference and relationship helpers shared by parsers and generators."""
