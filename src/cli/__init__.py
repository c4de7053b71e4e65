"""Command line interface for the Kraken client."""
