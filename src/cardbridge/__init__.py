"""cardbridge - turn chat task lists into tracker cards.

Parses the `[Create]` mini-language from Slack-style rich text (or its
plain-text rendering) into tasks with titles, assignees, descriptions and
checkboxes, and resolves space, deck and user names to tracker ids through a
refreshable in-memory name cache.
"""

__version__ = "0.1.0"
