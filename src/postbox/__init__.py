"""Postbox private messaging service."""
