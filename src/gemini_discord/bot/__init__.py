"""Discord adapter for the answer pipeline."""

from .client import AnswerBot

__all__ = ["AnswerBot"]
