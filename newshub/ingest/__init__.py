"""Loading candidate pools from cached documents."""

from .cache import ArticleRecord, ContentCache, Hashtag, SocialPost, load_cache

__all__ = ['ArticleRecord', 'ContentCache', 'Hashtag', 'SocialPost', 'load_cache']
