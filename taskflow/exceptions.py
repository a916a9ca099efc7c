"""Exceptions raised by the TaskFlow task manager.

The engines themselves never raise for refused edits or exhausted
recurrences; these errors cover caller mistakes at the store boundary
(unknown ids, edits the store does not allow).
"""

from __future__ import annotations


class TaskFlowError(Exception):
    """Base error carrying a translation key for the UI layer.

    Attributes:
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Values for the translated message
    """

    def __init__(
        self,
        message: str,
        translation_key: str | None = None,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize TaskFlowError."""
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(message)


class TaskNotFoundError(TaskFlowError):
    """Raised when a task id (or checklist item id) is not in the collection."""
