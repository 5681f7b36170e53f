"""Entrypoint for `python -m PBRConvert`."""

from .cli import main

if __name__ == "__main__":
    main()
