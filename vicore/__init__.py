"""vicore - vi-style key dispatch and tag navigation for Textual editors."""

__version__ = "0.1.0"
