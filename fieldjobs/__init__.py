"""FieldJobs - job lifecycle and scheduling engine for field service crews"""

__version__ = "1.0.0"
