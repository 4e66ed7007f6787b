"""Myth Parallels: candidate parallel narratives for a myth catalog"""

__version__ = "0.1.0"
