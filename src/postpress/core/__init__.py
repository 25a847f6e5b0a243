"""Build pipeline: enumerate, load, serialize and render posts."""
