"""
Ingest package: read-only sources for the loggers (GitHub REST API, local repository checkout).
"""
