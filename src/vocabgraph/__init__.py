"""Vocabulary graph: word-relationship lookups, quizzes and an AI tutor."""

__version__ = "0.1.0"
