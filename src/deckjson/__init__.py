"""PowerPoint decks to a versioned universal JSON schema."""

__version__ = "0.1.0"
