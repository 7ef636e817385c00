"""Core business logic: classification, signal clients, scoring, and data models.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or the database layer.
"""
