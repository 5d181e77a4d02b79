"""Env-driven config: brain provider resolution, postgres DSN, assistant tuning."""
from __future__ import annotations

import os
import unittest
from unittest.mock import patch

from aesthetica.clients.llm.providers import NoOpLLMClient
from aesthetica.clients.llm.registry import LLMRegistry, default_registry
from aesthetica.config import BrainConfig, PostgresConfig, database_configured, load_brain_config
from aesthetica.orchestrator.types import AssistantConfig, UserProfile


class TestBrainConfig(unittest.TestCase):
    def test_defaults_without_keys(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_brain_config()
        self.assertEqual(config.provider, "auto")
        self.assertIsNone(config.resolved_provider())
        self.assertIsNone(config.resolved_model())
        self.assertEqual(config.timeout_seconds, 45.0)

    def test_auto_prefers_openai(self):
        config = BrainConfig(openai_api_key="sk", gemini_api_key="g")
        self.assertEqual(config.resolved_provider(), "openai")
        self.assertEqual(config.resolved_model(), "gpt-4o-mini")

    def test_google_key_alias(self):
        with patch.dict(os.environ, {"GOOGLE_API_KEY": "g", "LLM_MODEL": "gemini-x"}, clear=True):
            config = load_brain_config()
        self.assertEqual(config.resolved_provider(), "gemini")
        self.assertEqual(config.resolved_model(), "gemini-x")

    def test_explicit_provider_needs_its_own_key(self):
        config = BrainConfig(provider="gemini", openai_api_key="sk")
        self.assertIsNone(config.resolved_provider())

    def test_overrides_win_over_env(self):
        with patch.dict(os.environ, {"BRAIN_TIMEOUT_SECONDS": "10", "LLM_PROVIDER": "OpenAI"}, clear=True):
            config = load_brain_config(timeout_seconds=5)
        self.assertEqual(config.provider, "openai")
        self.assertEqual(config.timeout_seconds, 5.0)

    def test_validation(self):
        with self.assertRaises(ValueError):
            BrainConfig(provider="anthropic")
        with self.assertRaises(ValueError):
            BrainConfig(timeout_seconds=0)
        with self.assertRaises(ValueError):
            BrainConfig(temperature=3)


class TestRegistry(unittest.TestCase):
    def test_no_credential_builds_noop(self):
        client = default_registry.build_from_config(BrainConfig())
        self.assertIsInstance(client, NoOpLLMClient)
        self.assertEqual(client.provider, "noop")

    def test_unknown_provider(self):
        with self.assertRaises(KeyError):
            LLMRegistry().build("openai", {})


class TestPostgresConfig(unittest.TestCase):
    def test_async_url(self):
        self.assertEqual(
            PostgresConfig(url="postgres://u:p@db/x").async_url,
            "postgresql+asyncpg://u:p@db/x",
        )

    def test_rejects_other_schemes(self):
        with self.assertRaises(ValueError):
            PostgresConfig(url="mysql://db/x")

    def test_from_env_mapping(self):
        config = PostgresConfig.from_env(
            {"DATABASE_URL": "postgresql://db/x", "DB_POOL_SIZE": "2", "DB_ECHO": "yes"},
            max_overflow=0,
        )
        self.assertEqual(config.pool_size, 2)
        self.assertEqual(config.max_overflow, 0)
        self.assertTrue(config.echo)
        self.assertEqual(config.application_name, "aesthetica")

    def test_rejects_empty_pool(self):
        with self.assertRaises(ValueError):
            PostgresConfig(url="postgresql://db/x", pool_size=0)

    def test_database_configured(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertFalse(database_configured())
        with patch.dict(os.environ, {"DATABASE_URL": "postgresql://db/x"}, clear=True):
            self.assertTrue(database_configured())


class TestAssistantConfig(unittest.TestCase):
    def test_invalid_values_fall_back(self):
        config = AssistantConfig.from_dict(
            {"max_materials": "x", "preview_chars": -4, "log_cooldown_seconds": "30", "brain_timeout_seconds": None}
        )
        self.assertEqual(config.max_materials, 3)
        self.assertEqual(config.preview_chars, 220)
        self.assertEqual(config.log_cooldown_seconds, 30.0)
        self.assertIsNone(config.brain_timeout_seconds)

    def test_round_trip(self):
        config = AssistantConfig(bot_name="Bot", default_emergency_country="ES")
        self.assertEqual(AssistantConfig.from_dict(config.to_dict()), config)


class TestUserProfile(unittest.TestCase):
    def test_pregnancy_flag_from_strings(self):
        self.assertIs(UserProfile.from_dict({"isPregnant": "false"}).is_pregnant, False)
        self.assertIs(UserProfile.from_dict({"is_pregnant": " Sí "}).is_pregnant, True)
        self.assertIs(UserProfile.from_dict({"isPregnant": True}).is_pregnant, True)

    def test_unrecognised_pregnancy_value_is_unknown(self):
        self.assertIsNone(UserProfile.from_dict({"isPregnant": "tal vez"}).is_pregnant)
        self.assertIsNone(UserProfile.from_dict({"isPregnant": 1}).is_pregnant)

    def test_camel_case_keys(self):
        profile = UserProfile.from_dict({"ageRange": "30-39", "previousProcedures": ["botox", ""]})
        self.assertEqual(profile.age_range, "30-39")
        self.assertEqual(profile.previous_procedures, ("botox",))


if __name__ == "__main__":
    unittest.main()
