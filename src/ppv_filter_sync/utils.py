"""
Utility module for common helper functions.

This module contains helpers for masking sensitive data (feed credentials,
storage names) before it reaches the logs.
"""

import os
import re
from urllib.parse import urlparse, urlunparse


# Values that are placeholders and never worth masking
DEFAULT_VALUES = {
    'CATEGORY_FEED_URL': 'https://your-provider.com/player_api.php?action=get_live_categories',
    'S3_ENDPOINT_URL': 'https://s3.amazonaws.com',
    'S3_REGION': 'us-east-1',
    'SETTINGS_S3_BUCKET': '',
    'SETTINGS_S3_KEY': 'settings.json',
}

SENSITIVE_PARAMS = [
    'username', 'password', 'token', 'key', 'secret', 'auth', 'session',
    'access_token', 'api_key', 'signature'
]


def sanitize_log_message(message: str) -> str:
    """
    Sanitize log messages by replacing sensitive data with masked values.

    Args:
        message (str): Original log message

    Returns:
        str: Sanitized log message with sensitive data masked
    """
    sensitive_values = []
    for var_name, default_val in DEFAULT_VALUES.items():
        env_val = os.getenv(var_name)
        if env_val and env_val != default_val:
            sensitive_values.append(env_val)

    # Replace longer strings first so substrings don't break them up
    sensitive_values.sort(key=len, reverse=True)

    sanitized_message = message
    for value in sensitive_values:
        sanitized_message = sanitized_message.replace(value, mask_value(value))

    for url in re.findall(r'https?://[^\s\'"<>]+', sanitized_message):
        if url not in DEFAULT_VALUES.values():
            sanitized_message = sanitized_message.replace(url, mask_url(url))

    return sanitized_message


def mask_value(value: str) -> str:
    """Mask a value, keeping a few characters at each end of longer values."""
    if len(value) <= 8:
        return '*' * len(value)
    visible_chars = max(3, len(value) // 4)
    return f"{value[:visible_chars]}{'*' * (len(value) - 2 * visible_chars)}{value[-visible_chars:]}"


def mask_url(url: str) -> str:
    """
    Mask credentials in a URL, keeping scheme, host and path.

    Xtream-style feeds carry the account in the query string
    (``?username=...&password=...``), and some providers embed it in the path.

    Args:
        url (str): Original URL

    Returns:
        str: Masked URL
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return f"{url.split('://')[0]}://***.***"

    netloc = parsed.netloc
    if '@' in netloc:
        netloc = '***@' + netloc.rsplit('@', 1)[1]

    return urlunparse((
        parsed.scheme,
        netloc,
        mask_sensitive_path(parsed.path),
        '',
        mask_sensitive_query(parsed.query),
        ''
    ))


def mask_sensitive_path(path: str) -> str:
    if not path:
        return path
    return '/'.join(mask_value(part) if is_potentially_sensitive(part) else part
                    for part in path.split('/'))


def mask_sensitive_query(query: str) -> str:
    if not query:
        return query

    masked_pairs = []
    for pair in query.split('&'):
        if '=' in pair:
            key, value = pair.split('=', 1)
            if key.lower() in SENSITIVE_PARAMS:
                masked_pairs.append(f"{key}={'*' * min(len(value), 20)}")
                continue
        masked_pairs.append(pair)
    return '&'.join(masked_pairs)


def is_potentially_sensitive(text: str) -> bool:
    """
    Check if a URL segment looks like a credential.

    Args:
        text (str): Text to check

    Returns:
        bool: True if text is potentially sensitive
    """
    sensitive_patterns = [
        r'.*[Ss]ecret.*',
        r'.*[Tt]oken.*',
        r'.*[Pp]assword.*',
        r'^[A-Za-z0-9_-]{20,}$',  # Long alphanumeric strings (likely tokens/keys)
    ]
    return any(re.match(pattern, text) for pattern in sensitive_patterns)


class SanitizedLogger:
    """
    A wrapper around a logger that sanitizes messages before logging.
    """

    def __init__(self, logger):
        self.logger = logger

    def debug(self, msg, *args, **kwargs):
        self.logger.debug(sanitize_log_message(str(msg)), *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self.logger.info(sanitize_log_message(str(msg)), *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self.logger.warning(sanitize_log_message(str(msg)), *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self.logger.error(sanitize_log_message(str(msg)), *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        self.logger.exception(sanitize_log_message(str(msg)), *args, **kwargs)
