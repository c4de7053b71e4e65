"""Credential and logging helpers for the Kraken client."""
