"""
Screening Interviewer.

Automated, turn-based screening interviews for job candidates.
"""

__version__ = "0.1.0"
