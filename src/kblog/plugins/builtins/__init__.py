"""Plugins shipped with kblog and registered by default."""
