"""Delivery helpers — chat block rendering and feedback action values."""

from policy_rag.delivery.formatter import (
    FeedbackSignal,
    cleanup_content,
    parse_feedback_value,
    to_display_blocks,
    to_plain_text,
)

__all__ = [
    "FeedbackSignal",
    "cleanup_content",
    "parse_feedback_value",
    "to_display_blocks",
    "to_plain_text",
]
