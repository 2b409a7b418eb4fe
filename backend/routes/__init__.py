"""Routes package initialization.
Exports chat and estimate blueprints.
"""

from .chat import chat_bp, init_chatbot
from .estimate import estimate_bp

__all__ = ['chat_bp', 'init_chatbot', 'estimate_bp']
