"""Task management API with role-based access control and task attachments."""

__version__ = "1.0.0"
