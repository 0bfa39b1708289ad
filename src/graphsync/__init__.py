"""
graph-search-sync: mirrors graph database transactions into a search index.
"""

__version__ = "0.1.0"
