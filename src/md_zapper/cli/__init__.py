"""
Command-line interface for md-zapper.
"""
