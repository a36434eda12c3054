"""registrack - client core for the trademark registration service.

Session handling, role-based access, service request normalization and
transport error classification for clients of the registration backend.
"""

__version__ = "0.1.0"
