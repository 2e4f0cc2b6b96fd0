"""
IO module for channel adapters.

Provides the terminal interface for conducting interviews.
"""

from screening_interviewer.io.text_interface import InterviewInterface, TextInterface

__all__ = ["InterviewInterface", "TextInterface"]
