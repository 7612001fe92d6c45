"""Serenity: wellness companion backend.

Chat with a crisis-aware companion, community posts, journaling, mood
tracking and daily activities, served as one Flask application.
"""

__version__ = "0.1.0"
