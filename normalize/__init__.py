"""
Normalize package: immutable records built from raw GitHub payloads.
"""
