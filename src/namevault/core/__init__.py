"""Core utilities shared by the NameVault services."""
