# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Configuration module for the assessment generator.

Handles loading configuration from YAML files and command-line arguments,
with proper merging and validation.
"""

import os
import json
import argparse
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

import yaml


# Default model for AI operations
DEFAULT_MODEL = "claude-sonnet-4-20250514"

MAX_WORD_COUNT = 50
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class GenerationConfig:
    """Configuration for crossword generation."""
    word_count: int = 10
    max_retries: int = 3
    attempt_timeout_seconds: float = 120.0
    retry_backoff_seconds: float = 1.5
    extra_terms: int = 5
    max_source_chars: int = 30000
    max_ai_callbacks: int = 10


@dataclass
class OutputConfig:
    """Configuration for output and logging."""
    directory: str = "./output"
    log_level: str = "INFO"
    log_file_prefix: str = "autocross"
    enable_console_logging: bool = True


@dataclass
class AIConfig:
    """Configuration for AI integration."""
    model: Optional[str] = None
    prompt_config: Optional[str] = None
    api_key: Optional[str] = None
    api_key_env: str = "ANTHROPIC_API_KEY"
    model_env: str = "ANTHROPIC_MODEL"


@dataclass
class StorageConfig:
    """Configuration for the assessment record store."""
    path: str = "./output/assessments.yaml"


@dataclass
class AssessmentConfig:
    """Complete configuration for generating one assessment."""
    topic: str = "General Knowledge"
    faculty_name: str = "Faculty"
    class_section: Optional[str] = None
    deadline: Optional[str] = None
    source_file: Optional[str] = None
    content: str = ""

    # Sub-configurations
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def __post_init__(self):
        """Convert dicts to dataclass instances if needed."""
        if isinstance(self.generation, dict):
            self.generation = GenerationConfig(**self.generation)
        if isinstance(self.output, dict):
            self.output = OutputConfig(**self.output)
        if isinstance(self.ai, dict):
            self.ai = AIConfig(**self.ai)
        if isinstance(self.storage, dict):
            self.storage = StorageConfig(**self.storage)

    @classmethod
    def from_yaml(cls, path: str) -> 'AssessmentConfig':
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            AssessmentConfig instance

        Raises:
            ConfigValidationError: If file doesn't exist or is invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigValidationError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Configuration file must contain a YAML mapping, got {type(data)}"
            )

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> 'AssessmentConfig':
        """Create AssessmentConfig from dictionary."""
        assessment_data = data.get('assessment', {}) or {}
        defaults = cls()

        config = cls(
            topic=assessment_data.get('topic', defaults.topic),
            faculty_name=assessment_data.get('faculty_name', defaults.faculty_name),
            class_section=assessment_data.get('class_section'),
            deadline=assessment_data.get('deadline'),
            source_file=assessment_data.get('source_file'),
            content=assessment_data.get('content', ''),
        )

        # Sub-configurations: unknown keys are a configuration error
        sections = {
            'generation': GenerationConfig,
            'output': OutputConfig,
            'ai': AIConfig,
            'storage': StorageConfig,
        }
        for name, section_cls in sections.items():
            if name not in data:
                continue
            section_data = data[name] or {}
            merged = asdict(getattr(config, name))
            unknown = set(section_data) - set(merged)
            if unknown:
                raise ConfigValidationError(
                    f"Unknown keys in '{name}' section: {sorted(unknown)}"
                )
            merged.update(section_data)
            setattr(config, name, section_cls(**merged))

        return config

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'AssessmentConfig':
        """
        Create configuration from command-line arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            AssessmentConfig instance
        """
        config = cls()

        if getattr(args, 'topic', None):
            config.topic = args.topic
        if getattr(args, 'faculty', None):
            config.faculty_name = args.faculty
        if getattr(args, 'section', None):
            config.class_section = args.section
        if getattr(args, 'deadline', None):
            config.deadline = args.deadline
        if getattr(args, 'source', None):
            config.source_file = args.source
        if getattr(args, 'text', None):
            config.content = args.text
        if getattr(args, 'count', None) is not None:
            config.generation.word_count = args.count
        if getattr(args, 'output', None):
            config.output.directory = args.output
        if getattr(args, 'store', None):
            config.storage.path = args.store
        if getattr(args, 'prompt_config', None):
            config.ai.prompt_config = args.prompt_config
        if getattr(args, 'api_key', None):
            config.ai.api_key = args.api_key
        if getattr(args, 'model', None):
            config.ai.model = args.model
        if getattr(args, 'verbose', False):
            config.output.log_level = "DEBUG"

        return config

    @classmethod
    def merge(
        cls,
        yaml_config: 'AssessmentConfig',
        cli_config: 'AssessmentConfig'
    ) -> 'AssessmentConfig':
        """
        Merge configurations with CLI taking precedence over YAML.

        Args:
            yaml_config: Configuration loaded from YAML file
            cli_config: Configuration from command-line arguments

        Returns:
            Merged AssessmentConfig instance
        """
        merged = AssessmentConfig(
            topic=yaml_config.topic,
            faculty_name=yaml_config.faculty_name,
            class_section=yaml_config.class_section,
            deadline=yaml_config.deadline,
            source_file=yaml_config.source_file,
            content=yaml_config.content,
            generation=yaml_config.generation,
            output=yaml_config.output,
            ai=yaml_config.ai,
            storage=yaml_config.storage,
        )

        # Override with CLI values (non-default values)
        default = cls()

        if cli_config.topic != default.topic:
            merged.topic = cli_config.topic
        if cli_config.faculty_name != default.faculty_name:
            merged.faculty_name = cli_config.faculty_name
        if cli_config.class_section:
            merged.class_section = cli_config.class_section
        if cli_config.deadline:
            merged.deadline = cli_config.deadline
        if cli_config.source_file:
            merged.source_file = cli_config.source_file
        if cli_config.content:
            merged.content = cli_config.content
        if cli_config.generation.word_count != default.generation.word_count:
            merged.generation.word_count = cli_config.generation.word_count
        if cli_config.output.directory != default.output.directory:
            merged.output.directory = cli_config.output.directory
        if cli_config.output.log_level != default.output.log_level:
            merged.output.log_level = cli_config.output.log_level
        if cli_config.storage.path != default.storage.path:
            merged.storage.path = cli_config.storage.path
        if cli_config.ai.prompt_config:
            merged.ai.prompt_config = cli_config.ai.prompt_config
        if cli_config.ai.api_key:
            merged.ai.api_key = cli_config.ai.api_key
        if cli_config.ai.model:
            merged.ai.model = cli_config.ai.model

        return merged

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        gen = self.generation

        if not self.topic or not self.topic.strip():
            errors.append("Topic cannot be empty")

        if not self.faculty_name or not self.faculty_name.strip():
            errors.append("Faculty name cannot be empty")

        if not 1 <= gen.word_count <= MAX_WORD_COUNT:
            errors.append(
                f"word_count must be between 1 and {MAX_WORD_COUNT}, "
                f"got {gen.word_count}"
            )

        if gen.max_retries < 1:
            errors.append("max_retries must be at least 1")

        if gen.attempt_timeout_seconds <= 0:
            errors.append("attempt_timeout_seconds must be positive")

        if gen.retry_backoff_seconds < 0:
            errors.append("retry_backoff_seconds must be non-negative")

        if gen.extra_terms < 0:
            errors.append("extra_terms must be non-negative")

        if gen.max_source_chars <= 0:
            errors.append("max_source_chars must be positive")

        # One extraction call plus every layout attempt must fit
        if gen.max_ai_callbacks < gen.max_retries + 1:
            errors.append(
                f"max_ai_callbacks ({gen.max_ai_callbacks}) must allow one "
                f"extraction call plus {gen.max_retries} layout attempts"
            )

        if self.output.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid log level '{self.output.log_level}'. "
                f"Must be one of: {VALID_LOG_LEVELS}"
            )

        if self.source_file and not Path(self.source_file).exists():
            errors.append(f"Source file not found: {self.source_file}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'assessment': {
                'topic': self.topic,
                'faculty_name': self.faculty_name,
                'class_section': self.class_section,
                'deadline': self.deadline,
                'source_file': self.source_file,
                'content': self.content,
            },
            'generation': asdict(self.generation),
            'output': asdict(self.output),
            'ai': asdict(self.ai),
            'storage': asdict(self.storage),
        }


def discover_api_key(config: AssessmentConfig) -> Optional[str]:
    """
    Discover API key from multiple sources in priority order.

    Priority order:
    1. CLI argument (already in config if provided)
    2. Config file api_key field
    3. Environment variable (ANTHROPIC_API_KEY or custom)
    4. Anthropic config file (~/.anthropic/api_key)
    5. Anthropic config JSON (~/.config/anthropic/config.json)

    Args:
        config: AssessmentConfig instance

    Returns:
        API key string or None if not found
    """
    # Priority 1-2: Already in config
    if config.ai.api_key and config.ai.api_key != "null":
        return config.ai.api_key

    # Priority 3: Environment variable
    env_var = config.ai.api_key_env or "ANTHROPIC_API_KEY"
    if os.environ.get(env_var):
        return os.environ[env_var]

    # Priority 4: Anthropic config file (plain text)
    anthropic_key_file = Path.home() / ".anthropic" / "api_key"
    if anthropic_key_file.exists():
        key = anthropic_key_file.read_text().strip()
        if key:
            return key

    # Priority 5: Anthropic config JSON
    anthropic_config = Path.home() / ".config" / "anthropic" / "config.json"
    if anthropic_config.exists():
        try:
            cfg = json.loads(anthropic_config.read_text())
            if cfg.get("api_key"):
                return cfg["api_key"]
        except (json.JSONDecodeError, AttributeError):
            return None

    return None


def get_model(config: AssessmentConfig) -> str:
    """
    Get AI model from config with fallback chain.

    Priority order:
    1. Config ai.model field (from CLI or config file)
    2. Environment variable (ANTHROPIC_MODEL or custom)
    3. Default model
    """
    if config.ai.model and config.ai.model != "null":
        return config.ai.model

    env_var = config.ai.model_env or "ANTHROPIC_MODEL"
    if os.environ.get(env_var):
        return os.environ[env_var]

    return DEFAULT_MODEL


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Generate crossword assessments from course material",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # From a lecture document
  autocross --topic "Cell Biology" --source lecture3.pdf --count 10

  # From inline text
  autocross --topic "Networking" --text "TCP is a transport protocol ..."

  # Using YAML configuration, CLI arguments override YAML
  autocross --config assessment.yaml --count 8
"""
    )

    parser.add_argument(
        "--config", "-c",
        metavar="PATH",
        help="YAML configuration file"
    )

    # Assessment settings
    parser.add_argument(
        "--topic", "-t",
        metavar="TEXT",
        help="Assessment topic or context"
    )
    parser.add_argument(
        "--source", "-s",
        metavar="PATH",
        help="Source document (pdf, doc, docx, ppt, pptx)"
    )
    parser.add_argument(
        "--text",
        metavar="TEXT",
        help="Source text used instead of, or alongside, a document"
    )
    parser.add_argument(
        "--count", "-n",
        type=int,
        metavar="INT",
        help="Number of crossword words (default: 10)"
    )
    parser.add_argument(
        "--faculty", "-f",
        metavar="NAME",
        help="Faculty name the assessment belongs to"
    )
    parser.add_argument(
        "--section",
        metavar="TEXT",
        help="Class section"
    )
    parser.add_argument(
        "--deadline",
        metavar="ISO8601",
        help="Submission deadline"
    )

    # Output settings
    parser.add_argument(
        "--output", "-o",
        metavar="PATH",
        help="Output directory for logs"
    )
    parser.add_argument(
        "--store",
        metavar="PATH",
        help="YAML file holding assessments and responses"
    )

    # AI settings
    parser.add_argument(
        "--prompt-config",
        metavar="PATH",
        help="Path to prompts.yaml file"
    )
    parser.add_argument(
        "--api-key",
        metavar="KEY",
        help="Anthropic API key"
    )
    parser.add_argument(
        "--model",
        metavar="MODEL",
        help="AI model to use"
    )

    # Other options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config without generating"
    )

    return parser


def load_config(args: Optional[argparse.Namespace] = None) -> AssessmentConfig:
    """
    Load configuration from command-line and/or YAML file.

    Args:
        args: Parsed command-line arguments (if None, parses sys.argv)

    Returns:
        Fully resolved AssessmentConfig

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if args is None:
        parser = create_argument_parser()
        args = parser.parse_args()

    yaml_config = None
    if getattr(args, 'config', None):
        yaml_config = AssessmentConfig.from_yaml(args.config)

    cli_config = AssessmentConfig.from_args(args)

    if yaml_config:
        config = AssessmentConfig.merge(yaml_config, cli_config)
    else:
        config = cli_config

    errors = config.validate()
    if errors:
        raise ConfigValidationError(
            "Configuration validation failed:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )

    return config
