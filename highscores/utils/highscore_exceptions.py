"""
Custom exceptions for the highscore system with user-friendly error messages.
"""

class HighscoreException(Exception):
    """Base exception for highscore-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class StorageReadError(HighscoreException):
    """Raised when highscore entries cannot be loaded from storage."""
    def __init__(self, details: str = None):
        super().__init__(
            f"Failed to load highscore data: {details}",
            "❌ Highscores could not be loaded. Please try again later."
        )

class StorageWriteError(HighscoreException):
    """Raised when a highscore entry cannot be persisted."""
    def __init__(self, item_id: int, details: str = None):
        self.item_id = item_id
        super().__init__(
            f"Failed to save highscore entry for item {item_id}: {details}",
            "❌ Failed to save score. It will be lost on the next reload."
        )

class UnknownObjectError(HighscoreException):
    """Raised when a board is requested for an item with no recorded entries."""
    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(
            f"No highscore data for item {item_id}",
            f"❌ No highscores have been recorded for item `{item_id}` yet!"
        )

class InvalidQueryError(HighscoreException, ValueError):
    """Raised when a clear type or score type cannot be parsed."""
    def __init__(self, field: str, value: str, allowed):
        super().__init__(
            f"Invalid {field} '{value}'",
            f"❌ `{value}` is not a valid {field}. Use one of: {', '.join(allowed)}"
        )
