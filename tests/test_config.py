"""Tests for config module."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from mediasign.config import (
    ConfigError,
    StorageConfig,
    bucket_env_key,
    load_cache_options,
    load_operator_buckets,
    load_storage_config,
    resolve_bucket_alias,
)


class TestLoadStorageConfig:

    def test_configured(self) -> None:
        env = {
            "MEDIASIGN_SUPABASE_URL": "https://proj.supabase.co",
            "MEDIASIGN_SUPABASE_KEY": "anon",
        }
        with patch.dict(os.environ, env, clear=True):
            assert load_storage_config() == StorageConfig("https://proj.supabase.co", "anon")

    def test_missing_key_returns_none_and_logs(self, caplog) -> None:
        env = {"MEDIASIGN_SUPABASE_URL": "https://proj.supabase.co"}
        with patch.dict(os.environ, env, clear=True):
            assert load_storage_config() is None
        assert "not configured" in caplog.text

    def test_blank_values_ignored(self) -> None:
        env = {"MEDIASIGN_SUPABASE_URL": "  ", "MEDIASIGN_SUPABASE_KEY": "anon"}
        with patch.dict(os.environ, env, clear=True):
            assert load_storage_config() is None

    def test_silent_when_asked(self, caplog) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert load_storage_config(log_missing=False) is None
        assert caplog.text == ""


class TestLoadCacheOptionsGlobal:

    def test_no_env_vars_returns_empty(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert load_cache_options() == {}

    def test_all_vars_set(self) -> None:
        env = {
            "MEDIASIGN_TTL": "300",
            "MEDIASIGN_TIMEOUT": "2.5",
            "MEDIASIGN_COALESCE": "yes",
        }
        with patch.dict(os.environ, env, clear=True):
            assert load_cache_options() == {
                "ttl_seconds": 300,
                "timeout": 2.5,
                "coalesce": True,
            }

    def test_coalesce_false(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_COALESCE": "off"}, clear=True):
            assert load_cache_options() == {"coalesce": False}

    def test_non_numeric_ttl_raises(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_TTL": "sixty"}, clear=True):
            with pytest.raises(ConfigError, match="TTL"):
                load_cache_options()

    def test_non_positive_timeout_raises(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_TIMEOUT": "0"}, clear=True):
            with pytest.raises(ConfigError, match="positive"):
                load_cache_options()

    def test_bad_flag_raises(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_COALESCE": "maybe"}, clear=True):
            with pytest.raises(ConfigError, match="boolean"):
                load_cache_options()


class TestLoadCacheOptionsPerBucket:

    def test_bucket_ttl_overrides_global(self) -> None:
        env = {"MEDIASIGN_TTL": "60", "MEDIASIGN_DOCUMENTS_TTL": "300"}
        with patch.dict(os.environ, env, clear=True):
            assert load_cache_options("documents") == {"ttl_seconds": 300}

    def test_bucket_falls_back_to_global(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_TTL": "90"}, clear=True):
            assert load_cache_options("media") == {"ttl_seconds": 90}

    def test_no_bucket_ignores_bucket_vars(self) -> None:
        env = {"MEDIASIGN_TTL": "60", "MEDIASIGN_DOCUMENTS_TTL": "300"}
        with patch.dict(os.environ, env, clear=True):
            assert load_cache_options() == {"ttl_seconds": 60}

    def test_bucket_blank_falls_back_to_global(self) -> None:
        env = {"MEDIASIGN_TTL": "60", "MEDIASIGN_DOCUMENTS_TTL": "  "}
        with patch.dict(os.environ, env, clear=True):
            assert load_cache_options("documents") == {"ttl_seconds": 60}

    def test_bucket_name_normalized(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_OP_ASSETS_TIMEOUT": "4"}, clear=True):
            assert load_cache_options("op-assets") == {"timeout": 4.0}

    def test_bucket_env_key(self) -> None:
        assert bucket_env_key("op_assets") == "OP_ASSETS"
        assert bucket_env_key(" athlete.media ") == "ATHLETE_MEDIA"


class TestLoadOperatorBuckets:

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            buckets = load_operator_buckets()
        assert buckets.to_dict() == {
            "assets": "op_assets",
            "documents": "op_assets",
            "logo": "op_assets",
        }

    def test_documents_and_logo_follow_assets(self) -> None:
        with patch.dict(os.environ, {"MEDIASIGN_OPERATOR_ASSETS_BUCKET": "ops"}, clear=True):
            buckets = load_operator_buckets()
        assert (buckets.assets, buckets.documents, buckets.logo) == ("ops", "ops", "ops")

    def test_explicit_buckets(self) -> None:
        env = {
            "MEDIASIGN_OPERATOR_ASSETS_BUCKET": " ops ",
            "MEDIASIGN_OPERATOR_DOCUMENTS_BUCKET": "op_docs",
            "MEDIASIGN_OPERATOR_LOGO_BUCKET": "op_logos",
        }
        with patch.dict(os.environ, env, clear=True):
            buckets = load_operator_buckets()
        assert (buckets.assets, buckets.documents, buckets.logo) == ("ops", "op_docs", "op_logos")


class TestResolveBucketAlias:

    def test_plain_bucket_unchanged(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_bucket_alias("media") == "media"
            assert resolve_bucket_alias("") == ""

    def test_aliases_follow_operator_buckets(self) -> None:
        env = {
            "MEDIASIGN_OPERATOR_ASSETS_BUCKET": "ops",
            "MEDIASIGN_OPERATOR_DOCUMENTS_BUCKET": "op_docs",
        }
        with patch.dict(os.environ, env, clear=True):
            assert resolve_bucket_alias("@operator-assets") == "ops"
            assert resolve_bucket_alias("@Operator-Documents") == "op_docs"
            assert resolve_bucket_alias("@operator-logo") == "ops"
