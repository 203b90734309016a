"""Configuration, logging, errors and the RPC registry."""
