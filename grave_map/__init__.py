"""Grave map: balanced district placement for a virtual graveyard."""

__version__ = "0.1.0"
