"""Core services: configuration, logging, exceptions and retry."""
