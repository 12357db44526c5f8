"""HTTP API for the Postbox service."""
