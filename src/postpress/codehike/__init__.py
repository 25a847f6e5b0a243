"""Annotated, highlighted code walkthroughs for MDX posts."""

from postpress.codehike.components import CH
from postpress.codehike.plugin import code_hike
from postpress.codehike.themes import load_theme

__all__ = ["CH", "code_hike", "load_theme"]
