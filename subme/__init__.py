"""
SubMe client core - translation and caching pipeline.

The content-subscription client's UI calls into this package to
translate user content (plain strings and HTML) and to read the domain
API through a short-lived response cache.
"""

__version__ = "0.1.0"
