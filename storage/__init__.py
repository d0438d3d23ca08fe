"""
Storage package: retry executor and the Google Sheets append pipeline.
"""

from .retry import RetryPolicy, retrying, with_retry

__all__ = ["RetryPolicy", "retrying", "with_retry"]
