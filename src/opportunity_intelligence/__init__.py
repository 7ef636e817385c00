"""Opportunity Intelligence MCP Server.

Find white-space markets for a business model by weighing developer activity,
media coverage, and search interest against each country's size and readiness.
"""

__version__ = "0.1.0"
