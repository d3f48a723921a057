"""starpin: scaffolding and maintenance CLI for Star Frame programs."""

__version__ = "0.1.0"
