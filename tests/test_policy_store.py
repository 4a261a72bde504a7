"""Unit tests for feature policy blobs and the JSON policy store"""

import json
import os

import pytest

from gitecops.errors import ValidationError
from gitecops.policy_store import FeaturePolicy, JsonPolicyStore, PolicyDocument


class TestPolicyDocument:
    """Tests for policy JSON round-tripping"""

    def test_parse(self):
        """Test a well-formed document"""
        blob = json.dumps({
            'managed': True,
            'features': {
                'smartExperience': {'allowEdit': False, 'default': 1, 'isEnabled': True},
            }
        })
        document = PolicyDocument.from_json(blob)

        assert document.managed is True
        policy = document.features['smartExperience']
        assert policy == FeaturePolicy(allow_edit=False, default=1, is_enabled=True)

    def test_round_trip(self):
        """Test to_json output parses back to an equal document"""
        document = PolicyDocument(managed=True, features={
            'a': FeaturePolicy(False, 1, True),
            'b': FeaturePolicy(),
        })

        assert PolicyDocument.from_json(document.to_json()) == document

    def test_json_keys(self):
        """Test the serialized key names"""
        data = json.loads(PolicyDocument(features={'a': FeaturePolicy()}).to_json())

        assert data == {
            'managed': False,
            'features': {'a': {'allowEdit': True, 'default': 0, 'isEnabled': False}},
        }

    def test_missing_fields_default(self):
        """Test an empty object is an unmanaged document with no features"""
        assert PolicyDocument.from_json('{}') == PolicyDocument()

    @pytest.mark.parametrize("blob", [
        '{not json',
        '[]',
        '"managed"',
        '{"managed": "yes"}',
        '{"features": []}',
        '{"features": {"a": 1}}',
        '{"features": {"a": {"default": 2}}}',
        '{"features": {"a": {"default": true}}}',
        '{"features": {"a": {"isEnabled": "true"}}}',
    ])
    def test_malformed_documents(self, blob):
        """Test malformed blobs raise ValidationError"""
        with pytest.raises(ValidationError):
            PolicyDocument.from_json(blob)

    def test_with_feature_returns_copy(self):
        """Test with_feature leaves the original untouched"""
        original = PolicyDocument()
        updated = original.with_feature('a', FeaturePolicy(default=1))

        assert original.features == {}
        assert updated.features['a'].default == 1


class TestJsonPolicyStore:
    """Tests for the file-backed store"""

    def test_creates_directory(self, temp_policy_dir):
        """Test the store creates its directory"""
        path = os.path.join(temp_policy_dir, 'nested', 'policies')
        JsonPolicyStore(path)

        assert os.path.isdir(path)

    def test_read_absent_key(self, temp_policy_dir):
        """Test unknown keys read as None"""
        assert JsonPolicyStore(temp_policy_dir).read_policy('missing') is None

    def test_write_then_read(self, temp_policy_dir):
        """Test blobs are stored verbatim"""
        store = JsonPolicyStore(temp_policy_dir)
        store.write_policy('feature-flags', '{"managed": true}')

        assert store.read_policy('feature-flags') == '{"managed": true}'
        assert os.path.exists(os.path.join(temp_policy_dir, 'feature-flags.json'))

    def test_overwrite(self, temp_policy_dir):
        """Test a second write replaces the blob"""
        store = JsonPolicyStore(temp_policy_dir)
        store.write_policy('k', '1')
        store.write_policy('k', '2')

        assert store.read_policy('k') == '2'

    def test_save_and_load(self, temp_policy_dir):
        """Test documents round-trip through the store"""
        store = JsonPolicyStore(temp_policy_dir)
        document = PolicyDocument(managed=True, features={'x': FeaturePolicy(True, 1, True)})
        store.save('smart', document)

        assert store.load('smart') == document
        assert store.load('other') is None

    def test_load_malformed(self, temp_policy_dir):
        """Test a corrupt stored blob raises ValidationError"""
        store = JsonPolicyStore(temp_policy_dir)
        store.write_policy('broken', '{')

        with pytest.raises(ValidationError):
            store.load('broken')

    @pytest.mark.parametrize("key", ['../escape', 'a/b', '', '..', 'x\\y'])
    def test_invalid_keys(self, temp_policy_dir, key):
        """Test keys that could escape the directory are rejected"""
        store = JsonPolicyStore(temp_policy_dir)

        with pytest.raises(ValidationError):
            store.write_policy(key, '{}')
