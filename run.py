#!/usr/bin/env python3
"""
openrouter-multimodal-mcp v1.0.0
MCP server for image and audio analysis through OpenRouter.

Usage:
    python run.py
    python run.py --config=/path/to/mcp-config.json
    # or
    python -m openrouter_multimodal

Requirements:
    - Python 3.9+
    - OPENROUTER_API_KEY environment variable (or apiKey in the --config file)
    - mcp[cli], openai, httpx, pydantic (pip install -e .)
"""

import sys
import os

# Ensure Python 3.9+
if sys.version_info < (3, 9):
    print("Error: Python 3.9 or higher is required", file=sys.stderr)
    print(f"Current version: {sys.version}", file=sys.stderr)
    sys.exit(1)

# Add the server directory to path so 'openrouter_multimodal' can be imported
server_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, server_dir)

from openrouter_multimodal import main

if __name__ == "__main__":
    main()
