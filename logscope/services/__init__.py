"""
Service layer for logscope.

This module contains the HTTP client for the log search server and its
configuration.
"""

from .log_search_client import LogSearchClient, LogSearchConfig, create_log_search_client

__all__ = ["LogSearchClient", "LogSearchConfig", "create_log_search_client"]
