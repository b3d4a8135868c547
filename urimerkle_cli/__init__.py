"""
Module 09C - urimerkle CLI

Command-line interface for building and checking Merkle commitments over
index -> URI mappings.

Usage:
    python -m urimerkle_cli build arweave-mapping.json --out ./merkle
    python -m urimerkle_cli verify ./merkle
    python -m urimerkle_cli prove ./merkle 42
"""

__version__ = "0.1.0"
