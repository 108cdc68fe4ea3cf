from .client import YouTubeClient

__all__ = ['YouTubeClient']
