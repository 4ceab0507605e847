"""Type definitions and enums for the form memory engine."""

from enum import Enum


class InteractionType(str, Enum):
    """Kinds of form interaction the memory store accepts."""

    CREATED = "created"  # Form was generated or created
    FILLED = "filled"  # A response was submitted
    ANALYZED = "analyzed"  # Responses were charted or analyzed
    VIEWED = "viewed"  # Form was opened
    EDITED = "edited"  # Form structure changed


class MemoryType(str, Enum):
    """Memory categories written by the tracking endpoints.

    The store accepts arbitrary strings for ``memory_type``; these are the
    values this engine produces itself.
    """

    FORM_INTERACTION = "form_interaction"
    CONVERSATION = "conversation"
    USER_PREFERENCE = "user_preference"
