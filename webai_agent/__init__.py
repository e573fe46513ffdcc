"""
Vision-driven browser agent.

This package drives a headless browser, labels the interactive elements on
the page, and lets a vision LLM decide where to navigate or what to click
from a screenshot.
"""

__version__ = "0.1.0"
