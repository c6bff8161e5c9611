"""Game, query and bookkeeping logic for a group chat bot, free of any chat protocol."""

__version__ = "0.1.0"