"""
Scoped, resumable web crawler: records every link it finds and recursively
fetches the ones under the initial url.
"""

__version__ = "0.1.0"
