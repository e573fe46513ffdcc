"""
Entry point for the WebAI agent: opens a browser, labels clickable elements,
and lets a vision LLM browse until it can answer the prompt.

The implementation lives under webai_agent/.
"""

from __future__ import annotations

import sys

from webai_agent.cli import main

if __name__ == "__main__":
    sys.exit(main())
