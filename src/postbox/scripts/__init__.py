"""Operational scripts for Postbox."""
