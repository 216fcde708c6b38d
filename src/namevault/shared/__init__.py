"""Shared utilities for NameVault: errors, logging and constants."""
