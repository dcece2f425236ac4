"""
Settings storage module.

This module loads and saves the settings document holding the filter
collection, either from a local JSON file or from S3-compatible storage.
"""

import os
import json
import time
import logging
import tempfile
from typing import Any, Dict

import boto3
from botocore.exceptions import ClientError

from .config import Config
from .filters import FilterCollection
from .utils import SanitizedLogger


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = SanitizedLogger(logging.getLogger(__name__))

FILTER_SETTINGS_KEY = 'filter'


class SettingsError(Exception):
    """Raised when the settings document cannot be read or is malformed."""


def parse_settings(content: str) -> Dict[str, Any]:
    """
    Parse the settings document.

    Args:
        content (str): JSON text of the settings document

    Returns:
        dict: Settings

    Raises:
        SettingsError: If the document is not a JSON object
    """
    try:
        settings = json.loads(content)
    except ValueError as e:
        raise SettingsError(f"Settings document is not valid JSON: {e}") from e

    if not isinstance(settings, dict):
        raise SettingsError("Settings document must be a JSON object")
    return settings


def serialize_settings(settings: Dict[str, Any]) -> str:
    return json.dumps(settings, indent=2, ensure_ascii=False)


def collection_from_settings(settings: Dict[str, Any]) -> FilterCollection:
    """
    Build the filter collection from the settings' filter map.

    JSON object keys are strings, so keys are converted back to integers.
    A settings document without a filter map yields an empty collection.

    Raises:
        SettingsError: If the filter map is not an object or a key is not an integer
    """
    raw_filters = settings.get(FILTER_SETTINGS_KEY) or {}
    if not isinstance(raw_filters, dict):
        raise SettingsError(f"Settings '{FILTER_SETTINGS_KEY}' must be an object")

    collection = FilterCollection()
    for raw_key, payload in raw_filters.items():
        try:
            key = int(raw_key)
        except (TypeError, ValueError) as e:
            raise SettingsError(f"Filter key must be an integer, got {raw_key!r}") from e
        # '1', '01' and ' 1' all convert to 1
        if key in collection:
            raise SettingsError(f"Filter key {raw_key!r} duplicates existing key {key}")
        collection.put(key, payload)
    return collection


def collection_to_settings(settings: Dict[str, Any], collection: FilterCollection) -> Dict[str, Any]:
    """Return a copy of settings with the filter map replaced by the collection."""
    updated = dict(settings)
    updated[FILTER_SETTINGS_KEY] = {str(key): payload for key, payload in sorted(collection.to_dict().items())}
    return updated


def load_settings(path: str) -> Dict[str, Any]:
    """
    Load the settings document from a local file.

    Args:
        path (str): Path of the settings file

    Returns:
        dict: Settings

    Raises:
        SettingsError: If the file cannot be read or parsed
    """
    logger.info(f"Loading settings from {path}")

    try:
        if os.path.getsize(path) > Config.MAX_SETTINGS_SIZE:
            raise SettingsError(f"Settings file exceeds maximum allowed size of {Config.MAX_SETTINGS_SIZE} bytes")

        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise SettingsError(f"Error reading settings file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SettingsError(f"Error decoding settings file {path}: {e}") from e

    return parse_settings(content)


def save_settings(settings: Dict[str, Any], path: str) -> None:
    """
    Save the settings document to a local file.

    The document is written to a temporary file next to the target and moved
    into place, so readers never see a half-written file.

    Args:
        settings (dict): Settings to save
        path (str): Path of the settings file
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=directory, prefix='.settings-', suffix='.json')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(serialize_settings(settings))
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise

    file_size_kb = os.path.getsize(path) / 1024
    logger.info(f"Settings saved locally as {path} (size: {file_size_kb:.2f} KB)")


def create_s3_client(config: Any):
    """
    Create an S3 client for the configured S3-compatible storage

    Args:
        config: Configuration object with S3 settings

    Raises:
        ValueError: If the endpoint URL is invalid or credentials are missing
    """
    endpoint_url = config.S3_COMPATIBLE_CONFIG['endpoint_url']
    if not endpoint_url or not isinstance(endpoint_url, str) or not endpoint_url.startswith(('http://', 'https://')):
        raise ValueError(f"Invalid S3 endpoint URL: {endpoint_url}. Must be a valid HTTP/HTTPS URL.")

    aws_access_key_id = os.environ.get('AWS_ACCESS_KEY_ID')
    aws_secret_access_key = os.environ.get('AWS_SECRET_ACCESS_KEY')
    if not aws_access_key_id or not aws_secret_access_key:
        raise ValueError("AWS credentials not found in environment variables. Please set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY.")

    return boto3.client(
        's3',
        endpoint_url=endpoint_url,
        aws_access_key_id=aws_access_key_id,
        aws_secret_access_key=aws_secret_access_key,
        region_name=config.S3_COMPATIBLE_CONFIG['region']
    )


def load_settings_from_s3(bucket_name: str, object_key: str, config: Any) -> Dict[str, Any]:
    """
    Load the settings document from S3-compatible storage

    Args:
        bucket_name (str): S3 bucket name
        object_key (str): S3 object key
        config: Configuration object with S3 settings

    Returns:
        dict: Settings

    Raises:
        SettingsError: If the object cannot be read or parsed
        ClientError: If the storage request fails for any other reason than a missing object
    """
    logger.info(f"Loading settings from S3-compatible storage: s3://{bucket_name}/{object_key}")
    s3_client = create_s3_client(config)

    try:
        response = s3_client.get_object(Bucket=bucket_name, Key=object_key)
    except ClientError as e:
        if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
            raise SettingsError(f"Settings object not found: s3://{bucket_name}/{object_key}") from e
        logger.error(f"Error loading settings from S3-compatible storage: {e}")
        raise

    if response.get('ContentLength', 0) > Config.MAX_SETTINGS_SIZE:
        raise SettingsError(f"Settings object exceeds maximum allowed size of {Config.MAX_SETTINGS_SIZE} bytes")

    try:
        content = response['Body'].read().decode('utf-8')
    except UnicodeDecodeError as e:
        raise SettingsError(f"Error decoding settings object: {e}") from e

    return parse_settings(content)


def save_settings_to_s3(settings: Dict[str, Any], bucket_name: str, object_key: str, config: Any) -> None:
    """
    Save the settings document to S3-compatible storage

    Args:
        settings (dict): Settings to save
        bucket_name (str): S3 bucket name
        object_key (str): S3 object key
        config: Configuration object with S3 settings
    """
    logger.info(f"Uploading settings to S3-compatible storage: s3://{bucket_name}/{object_key}")
    s3_client = create_s3_client(config)

    try:
        s3_client.put_object(
            Bucket=bucket_name,
            Key=object_key,
            Body=serialize_settings(settings).encode('utf-8'),
            ContentType='application/json',
            Metadata={
                'uploaded-by': 'ppv-filter-sync',
                'upload-timestamp': str(int(time.time()))
            }
        )
        logger.info("Settings upload to S3-compatible storage completed successfully")
    except ClientError as e:
        logger.error(f"Error uploading settings to S3-compatible storage: {e}")
        raise
