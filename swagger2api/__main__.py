"""Entry point: python -m swagger2api"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
