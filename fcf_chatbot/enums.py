# fcf_chatbot/enums.py
from enum import Enum


class EntryType(str, Enum):
    """Kinds of entries that make up a conversation transcript"""
    AVATAR = "avatar"        # Header robot shown at the top of a conversation
    BOT = "bot"              # Bot message with optional product cards
    OPTIONS = "options"      # Live option buttons for the current state
    USER = "user"            # Echo of the option the user picked
    ERROR = "error"          # Static message when the tree failed to load


class SelectionOutcome(str, Enum):
    SCHEDULED = "scheduled"  # Target exists, render pending after typing delay
    STALLED = "stalled"      # Target missing from the tree, nothing follows


class SessionStatus(str, Enum):
    READY = "ready"
    UNAVAILABLE = "unavailable"
