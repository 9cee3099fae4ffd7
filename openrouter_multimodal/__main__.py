"""Entry point for ``python -m openrouter_multimodal``."""

from .server import main

if __name__ == "__main__":
    main()
