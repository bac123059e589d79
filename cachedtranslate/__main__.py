"""Module entrypoint for running cachedtranslate as ``python -m cachedtranslate``."""

from __future__ import annotations

from cachedtranslate.cli import main


if __name__ == "__main__":
    main()
