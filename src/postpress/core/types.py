"""Core type definitions."""

from typing import NewType

# Post identifier derived from a source filename (e.g., "hello-world")
Slug = NewType("Slug", str)

# URL path for routing (e.g., "/posts/hello-world")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)
