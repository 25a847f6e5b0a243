"""Postpress - static MDX blog pages with annotated code walkthroughs."""

__version__ = "0.1.0"
