"""Prompt templates for the parsers, router, search and answer composition."""
