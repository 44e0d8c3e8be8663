"""HTTP API for the Murmur application."""
