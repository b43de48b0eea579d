"""
Docling Job Service package.

Accepts document conversion requests over a FastAPI application, runs them
through docling on a bounded pool of background workers and lets clients poll
for status and the Markdown result.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
