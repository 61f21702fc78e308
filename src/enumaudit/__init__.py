"""enumaudit — find enum types surfaced through web-API request binding."""

__version__ = "0.1.0"
