"""Prompt templates and the registry that loads them."""
