"""
Travel Companion: answers travel questions by fusing a structured city
dataset with semantically retrieved travel notes, then streams Gemini's
answer back to the caller.
"""

__version__ = '1.0.0'
