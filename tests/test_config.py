# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""Unit tests for config module."""

import os
import sys
import tempfile
import unittest
from unittest.mock import patch

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from config import (
    AIConfig, AssessmentConfig, ConfigValidationError, DEFAULT_MODEL,
    GenerationConfig, OutputConfig, StorageConfig, create_argument_parser,
    discover_api_key, get_model, load_config,
)


class TestAssessmentConfig(unittest.TestCase):
    """Tests for AssessmentConfig class."""

    def test_default_config(self):
        """Test default configuration values."""
        config = AssessmentConfig()

        self.assertEqual(config.topic, "General Knowledge")
        self.assertEqual(config.faculty_name, "Faculty")
        self.assertIsNone(config.source_file)
        self.assertEqual(config.content, "")

    def test_nested_config_from_dict(self):
        """Test creating config with nested dict values."""
        config = AssessmentConfig(
            topic="Test",
            generation={'word_count': 8},
            storage={'path': './test.yaml'}
        )

        self.assertEqual(config.generation.word_count, 8)
        self.assertEqual(config.storage.path, './test.yaml')

    def test_validation_valid_config(self):
        """Test validation of valid configuration."""
        config = AssessmentConfig(topic="Cell Biology", faculty_name="Dr. Rao")

        self.assertEqual(config.validate(), [])

    def test_validation_empty_topic(self):
        config = AssessmentConfig(topic="  ")

        errors = config.validate()
        self.assertTrue(any("topic" in e.lower() for e in errors))

    def test_validation_word_count_range(self):
        for count in [0, 51]:
            with self.subTest(count=count):
                config = AssessmentConfig(generation={'word_count': count})
                errors = config.validate()
                self.assertTrue(any("word_count" in e for e in errors))

    def test_validation_retry_settings(self):
        config = AssessmentConfig(generation={
            'max_retries': 0,
            'attempt_timeout_seconds': 0,
            'retry_backoff_seconds': -1,
        })

        errors = config.validate()

        self.assertTrue(any("max_retries" in e for e in errors))
        self.assertTrue(any("attempt_timeout_seconds" in e for e in errors))
        self.assertTrue(any("retry_backoff_seconds" in e for e in errors))

    def test_validation_callback_budget(self):
        """The call budget must cover extraction plus every attempt."""
        config = AssessmentConfig(generation={'max_retries': 3, 'max_ai_callbacks': 3})

        errors = config.validate()

        self.assertTrue(any("max_ai_callbacks" in e for e in errors))

    def test_validation_log_level(self):
        config = AssessmentConfig(output={'log_level': 'LOUD'})

        self.assertTrue(any("log level" in e.lower() for e in config.validate()))

    def test_validation_missing_source(self):
        config = AssessmentConfig(source_file="/nonexistent/lecture.pdf")

        self.assertTrue(any("Source file not found" in e for e in config.validate()))

    def test_to_dict(self):
        config = AssessmentConfig(topic="Test", faculty_name="Dr. Rao")

        result = config.to_dict()

        self.assertEqual(result['assessment']['topic'], "Test")
        self.assertEqual(result['assessment']['faculty_name'], "Dr. Rao")
        self.assertEqual(result['generation']['max_retries'], 3)


class TestSubConfigs(unittest.TestCase):
    """Tests for the section dataclasses."""

    def test_generation_defaults(self):
        config = GenerationConfig()

        self.assertEqual(config.word_count, 10)
        self.assertEqual(config.max_retries, 3)
        self.assertEqual(config.retry_backoff_seconds, 1.5)
        self.assertEqual(config.max_source_chars, 30000)

    def test_output_defaults(self):
        config = OutputConfig()

        self.assertEqual(config.directory, "./output")
        self.assertEqual(config.log_level, "INFO")

    def test_ai_defaults(self):
        config = AIConfig()

        self.assertIsNone(config.model)
        self.assertIsNone(config.prompt_config)
        self.assertEqual(config.api_key_env, "ANTHROPIC_API_KEY")

    def test_storage_defaults(self):
        self.assertEqual(StorageConfig().path, "./output/assessments.yaml")


class TestYAMLLoading(unittest.TestCase):
    """Tests for YAML configuration loading."""

    def setUp(self):
        """Create a temporary YAML file for testing."""
        self.temp_file = tempfile.NamedTemporaryFile(
            mode='w', suffix='.yaml', delete=False
        )
        self.temp_file.write('''
assessment:
  topic: "Cell Biology"
  faculty_name: "Dr. Rao"
  class_section: "B2"

generation:
  word_count: 8
  max_retries: 4

storage:
  path: "./records.yaml"
''')
        self.temp_file.close()

    def tearDown(self):
        """Clean up temporary file."""
        os.unlink(self.temp_file.name)

    def test_load_from_yaml(self):
        config = AssessmentConfig.from_yaml(self.temp_file.name)

        self.assertEqual(config.topic, "Cell Biology")
        self.assertEqual(config.class_section, "B2")
        self.assertEqual(config.generation.word_count, 8)
        self.assertEqual(config.generation.max_retries, 4)
        self.assertEqual(config.generation.retry_backoff_seconds, 1.5)
        self.assertEqual(config.storage.path, "./records.yaml")

    def test_missing_file(self):
        with self.assertRaises(ConfigValidationError):
            AssessmentConfig.from_yaml("/nonexistent/config.yaml")

    def test_unknown_section_key(self):
        with open(self.temp_file.name, 'w') as f:
            f.write("generation:\n  word_cuont: 8\n")

        with self.assertRaises(ConfigValidationError) as ctx:
            AssessmentConfig.from_yaml(self.temp_file.name)

        self.assertIn("word_cuont", str(ctx.exception))

    def test_non_mapping_yaml(self):
        with open(self.temp_file.name, 'w') as f:
            f.write("- just\n- a list\n")

        with self.assertRaises(ConfigValidationError):
            AssessmentConfig.from_yaml(self.temp_file.name)

    def test_cli_overrides_yaml(self):
        parser = create_argument_parser()
        args = parser.parse_args([
            '--config', self.temp_file.name,
            '--count', '12',
            '--faculty', 'Prof. Iyer',
        ])

        config = load_config(args)

        self.assertEqual(config.topic, "Cell Biology")
        self.assertEqual(config.faculty_name, "Prof. Iyer")
        self.assertEqual(config.generation.word_count, 12)
        self.assertEqual(config.generation.max_retries, 4)


class TestArgumentParsing(unittest.TestCase):
    """Tests for CLI argument handling."""

    def test_from_args(self):
        parser = create_argument_parser()
        args = parser.parse_args([
            '--topic', 'Networking',
            '--text', 'TCP and UDP',
            '--count', '6',
            '--verbose',
        ])

        config = AssessmentConfig.from_args(args)

        self.assertEqual(config.topic, "Networking")
        self.assertEqual(config.content, "TCP and UDP")
        self.assertEqual(config.generation.word_count, 6)
        self.assertEqual(config.output.log_level, "DEBUG")

    def test_load_config_rejects_invalid(self):
        parser = create_argument_parser()
        args = parser.parse_args(['--count', '60'])

        with self.assertRaises(ConfigValidationError):
            load_config(args)

    def test_zero_count_is_not_ignored(self):
        """An explicit --count 0 reaches validation instead of the default."""
        parser = create_argument_parser()
        args = parser.parse_args(['--count', '0'])

        self.assertEqual(AssessmentConfig.from_args(args).generation.word_count, 0)
        with self.assertRaises(ConfigValidationError) as ctx:
            load_config(args)
        self.assertIn("word_count", str(ctx.exception))


class TestDiscovery(unittest.TestCase):
    """Tests for API key and model discovery."""

    def test_config_key_first(self):
        config = AssessmentConfig(ai={'api_key': 'sk-config'})

        with patch.dict(os.environ, {'ANTHROPIC_API_KEY': 'sk-env'}):
            self.assertEqual(discover_api_key(config), 'sk-config')

    def test_env_key(self):
        config = AssessmentConfig(ai={'api_key_env': 'AUTOCROSS_TEST_KEY'})

        with patch.dict(os.environ, {'AUTOCROSS_TEST_KEY': 'sk-env'}):
            self.assertEqual(discover_api_key(config), 'sk-env')

    def test_model_fallback(self):
        config = AssessmentConfig(ai={'model_env': 'AUTOCROSS_TEST_MODEL'})

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop('AUTOCROSS_TEST_MODEL', None)
            self.assertEqual(get_model(config), DEFAULT_MODEL)

        with patch.dict(os.environ, {'AUTOCROSS_TEST_MODEL': 'claude-test'}):
            self.assertEqual(get_model(config), 'claude-test')

    def test_model_from_config(self):
        config = AssessmentConfig(ai={'model': 'claude-configured'})

        self.assertEqual(get_model(config), 'claude-configured')


if __name__ == '__main__':
    unittest.main()
