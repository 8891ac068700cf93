"""User interfaces built on top of the conversion API."""
