"""
Unit tests for the settings storage module.
"""

import io
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError

from ppv_filter_sync.filters import FilterCollection, build_automated_filter
from ppv_filter_sync.settings_store import (
    SettingsError,
    collection_from_settings,
    collection_to_settings,
    load_settings,
    load_settings_from_s3,
    save_settings,
    save_settings_to_s3,
)


MANUAL_PAYLOAD = {
    'type': 'group-title',
    'name': 'Manual',
    'filter': 'Кино',
    'active': True,
    'case_sensitive': False,
}


def mock_s3_config() -> MagicMock:
    config = MagicMock()
    config.S3_COMPATIBLE_CONFIG = {
        'endpoint_url': 'https://s3.amazonaws.com',
        'region': 'us-east-1'
    }
    return config


class TestFilterSettingsConversion(unittest.TestCase):
    """Test cases for converting the settings filter map."""

    def test_collection_from_settings(self):
        collection = collection_from_settings({'filter': {'2': MANUAL_PAYLOAD, '10': 'broken'}})
        self.assertEqual(collection.to_dict(), {2: MANUAL_PAYLOAD, 10: 'broken'})

    def test_missing_filter_map(self):
        self.assertEqual(len(collection_from_settings({'api': True})), 0)
        self.assertEqual(len(collection_from_settings({'filter': None})), 0)

    def test_invalid_filter_map(self):
        with self.assertRaises(SettingsError):
            collection_from_settings({'filter': ['a']})
        with self.assertRaises(SettingsError):
            collection_from_settings({'filter': {'first': MANUAL_PAYLOAD}})

    def test_equivalent_filter_keys_are_rejected(self):
        """Test that keys converting to the same integer do not overwrite each other."""
        other = dict(MANUAL_PAYLOAD, filter='Новостные')
        for duplicate in ['01', ' 1']:
            with self.assertRaises(SettingsError):
                collection_from_settings({'filter': {'1': MANUAL_PAYLOAD, duplicate: other}})

    def test_collection_to_settings_keeps_other_keys(self):
        settings = {'port': '34400', 'filter': {}}
        collection = FilterCollection({3: MANUAL_PAYLOAD})
        collection.add(build_automated_filter('PPV'))

        updated = collection_to_settings(settings, collection)

        self.assertEqual(updated['port'], '34400')
        self.assertEqual(list(updated['filter']), ['3', '4'])
        self.assertEqual(settings['filter'], {})


class TestLocalSettings(unittest.TestCase):
    """Test cases for local settings files."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, 'settings.json')

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_save_and_load(self):
        settings = {'filter': {'1': MANUAL_PAYLOAD}, 'version': '2.0'}

        save_settings(settings, self.path)

        self.assertEqual(load_settings(self.path), settings)
        self.assertEqual(os.listdir(self.temp_dir), ['settings.json'])

    def test_save_creates_directory(self):
        path = os.path.join(self.temp_dir, 'nested', 'settings.json')
        save_settings({'filter': {}}, path)
        self.assertTrue(os.path.exists(path))

    def test_load_missing_file(self):
        with self.assertRaises(SettingsError):
            load_settings(self.path)

    def test_load_invalid_json(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write('{"filter": ')
        with self.assertRaises(SettingsError):
            load_settings(self.path)

    def test_load_non_object(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write('[]')
        with self.assertRaises(SettingsError):
            load_settings(self.path)


class TestS3Settings(unittest.TestCase):
    """Test cases for settings in S3-compatible storage."""

    def setUp(self):
        self.original_env = {
            'AWS_ACCESS_KEY_ID': os.environ.get('AWS_ACCESS_KEY_ID'),
            'AWS_SECRET_ACCESS_KEY': os.environ.get('AWS_SECRET_ACCESS_KEY'),
        }
        os.environ['AWS_ACCESS_KEY_ID'] = 'test_access_key'
        os.environ['AWS_SECRET_ACCESS_KEY'] = 'test_secret_key'

    def tearDown(self):
        for key, value in self.original_env.items():
            if value is not None:
                os.environ[key] = value
            elif key in os.environ:
                del os.environ[key]

    @patch('ppv_filter_sync.settings_store.boto3.client')
    def test_load_from_s3(self, mock_boto_client):
        body = json.dumps({'filter': {'1': MANUAL_PAYLOAD}}).encode('utf-8')
        mock_s3_client = MagicMock()
        mock_s3_client.get_object.return_value = {'Body': io.BytesIO(body), 'ContentLength': len(body)}
        mock_boto_client.return_value = mock_s3_client

        settings = load_settings_from_s3('test-bucket', 'settings.json', mock_s3_config())

        self.assertEqual(settings, {'filter': {'1': MANUAL_PAYLOAD}})
        mock_boto_client.assert_called_once_with(
            's3',
            endpoint_url='https://s3.amazonaws.com',
            aws_access_key_id='test_access_key',
            aws_secret_access_key='test_secret_key',
            region_name='us-east-1'
        )
        mock_s3_client.get_object.assert_called_once_with(Bucket='test-bucket', Key='settings.json')

    @patch('ppv_filter_sync.settings_store.boto3.client')
    def test_load_from_s3_missing_object(self, mock_boto_client):
        mock_s3_client = MagicMock()
        mock_s3_client.get_object.side_effect = ClientError(
            error_response={'Error': {'Code': 'NoSuchKey', 'Message': 'Not found'}},
            operation_name='GetObject'
        )
        mock_boto_client.return_value = mock_s3_client

        with self.assertRaises(SettingsError):
            load_settings_from_s3('test-bucket', 'settings.json', mock_s3_config())

    @patch('ppv_filter_sync.settings_store.boto3.client')
    def test_load_from_s3_access_denied(self, mock_boto_client):
        mock_s3_client = MagicMock()
        mock_s3_client.get_object.side_effect = ClientError(
            error_response={'Error': {'Code': 'AccessDenied', 'Message': 'Denied'}},
            operation_name='GetObject'
        )
        mock_boto_client.return_value = mock_s3_client

        with self.assertRaises(ClientError):
            load_settings_from_s3('test-bucket', 'settings.json', mock_s3_config())

    @patch('ppv_filter_sync.settings_store.boto3.client')
    def test_save_to_s3(self, mock_boto_client):
        mock_s3_client = MagicMock()
        mock_boto_client.return_value = mock_s3_client
        settings = {'filter': {'1': MANUAL_PAYLOAD}}

        save_settings_to_s3(settings, 'test-bucket', 'settings.json', mock_s3_config())

        call_args = mock_s3_client.put_object.call_args
        self.assertEqual(call_args[1]['Bucket'], 'test-bucket')
        self.assertEqual(call_args[1]['Key'], 'settings.json')
        self.assertEqual(call_args[1]['ContentType'], 'application/json')
        self.assertEqual(json.loads(call_args[1]['Body'].decode('utf-8')), settings)

    def test_missing_credentials(self):
        del os.environ['AWS_ACCESS_KEY_ID']
        with self.assertRaises(ValueError):
            save_settings_to_s3({}, 'test-bucket', 'settings.json', mock_s3_config())

    def test_invalid_endpoint(self):
        config = mock_s3_config()
        config.S3_COMPATIBLE_CONFIG = {'endpoint_url': 'ftp://storage', 'region': 'us-east-1'}
        with self.assertRaises(ValueError):
            load_settings_from_s3('test-bucket', 'settings.json', config)


if __name__ == '__main__':
    unittest.main()
