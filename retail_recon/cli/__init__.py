"""Command line interface (``retail-recon`` / ``python -m retail_recon.cli``)."""

from .__main__ import main

__all__ = ["main"]
