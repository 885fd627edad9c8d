"""
Request handlers.

FileHandler resolves request paths to files under the document root and
writes the landing page, the file, or a 404.
"""

from .files import FileHandler

__all__ = ["FileHandler"]
