"""Core layer: configuration, logging, exceptions and store interfaces."""
