"""Shared helpers."""

from f5xc_auth.utils.security import sanitize_path_for_log, sanitize_url_for_log, validate_file_path

__all__ = ["sanitize_path_for_log", "sanitize_url_for_log", "validate_file_path"]
