"""Lesson import service: documents in, lesson drafts and content blocks out."""
