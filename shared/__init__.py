"""
Shared code for the session service

Schemas, logging and redis helpers reused by the service packages.
"""
