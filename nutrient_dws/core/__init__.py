"""Configuration, logging, errors and HTTP transport."""
