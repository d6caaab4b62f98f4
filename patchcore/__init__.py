"""Building blocks for a system patch-management service: RPM names, update data, queue events and SQL helpers."""

__version__ = "2.0.52"