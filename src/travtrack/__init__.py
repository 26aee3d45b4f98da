"""Campaign bookkeeping for a Traveller-style tabletop game."""

__version__ = "0.3.0"
