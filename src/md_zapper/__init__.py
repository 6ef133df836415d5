"""
md-zapper: pick elements from HTML documents and copy them out as clean markdown.
"""

__version__ = "0.1.0"
