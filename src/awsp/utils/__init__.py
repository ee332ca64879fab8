"""Shared utilities for awsp."""
