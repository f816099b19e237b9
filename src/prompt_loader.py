# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Prompt loader module for the assessment generator.

Loads AI prompt templates from external YAML configuration, supporting
variable substitution and validation. Built-in defaults are used when no
prompt file is configured.
"""

import re
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Optional, Any, List, Tuple

import yaml


REQUIRED_PROMPTS = ('term_extraction', 'crossword_layout')


class PromptSchemaError(Exception):
    """Raised when prompt configuration schema is invalid."""
    pass


class PromptRenderError(Exception):
    """Raised when prompt variable substitution fails."""
    pass


@dataclass
class PromptTemplate:
    """
    A single prompt template with configuration.

    Attributes:
        name: Display name for the prompt
        description: What this prompt does
        system: System prompt template
        user: User prompt template
        model: Optional model override for this prompt
        temperature: Temperature setting for this prompt
        max_tokens: Maximum tokens for response
    """
    name: str
    description: str
    system: str
    user: str
    model: Optional[str] = None
    temperature: float = 0.1
    max_tokens: int = 4096

    # Pattern for variable substitution
    VARIABLE_PATTERN = re.compile(r'\{\{(\w+)\}\}')

    def render(self, **variables) -> Tuple[str, str]:
        """
        Render the prompt with variable substitution.

        Args:
            **variables: Variables to substitute into the template

        Returns:
            Tuple of (system_prompt, user_prompt)

        Raises:
            PromptRenderError: If required variables are missing
        """
        system_rendered = self._substitute(self.system, variables, 'system')
        user_rendered = self._substitute(self.user, variables, 'user')
        return system_rendered, user_rendered

    def _substitute(
        self,
        template: str,
        variables: Dict[str, Any],
        prompt_type: str
    ) -> str:
        """Substitute variables in template."""
        required_vars = set(self.VARIABLE_PATTERN.findall(template))

        missing = required_vars - set(variables.keys())
        if missing:
            raise PromptRenderError(
                f"Missing required variables for {prompt_type} prompt: {missing}"
            )

        def replace(match):
            value = variables[match.group(1)]
            if isinstance(value, list):
                return '\n'.join(f'- {item}' for item in value)
            return value if isinstance(value, str) else str(value)

        # Single pass: substituted values are never scanned again
        return self.VARIABLE_PATTERN.sub(replace, template)


@dataclass
class ModelDefaults:
    """Default settings for prompts."""
    model: Optional[str] = None
    temperature: float = 0.1
    max_tokens: int = 4096


class PromptLoader:
    """
    Loads and manages prompt templates from YAML configuration.

    Usage:
        loader = PromptLoader('prompts.yaml')
        template = loader.get('crossword_layout')
        system, user = template.render(topic='Biology', word_count=10, ...)
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the prompt loader.

        Args:
            config_path: Path to prompts.yaml, or None for built-in prompts

        Raises:
            PromptSchemaError: If configuration is invalid
        """
        self.config_path = Path(config_path) if config_path else None
        self.prompts: Dict[str, PromptTemplate] = {}
        self.defaults = ModelDefaults()
        self.version: str = "1.0"

        if self.config_path is None:
            self._load_data(yaml.safe_load(create_default_prompts_yaml()))
        else:
            self._load()

    def _load(self):
        """Load and validate prompt configuration from file."""
        if not self.config_path.exists():
            raise PromptSchemaError(
                f"Prompt configuration file not found: {self.config_path}"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PromptSchemaError(f"Invalid YAML in prompts config: {e}")

        self._load_data(data)

    def _load_data(self, data: Any):
        if not isinstance(data, dict):
            raise PromptSchemaError("Prompts configuration must be a mapping")

        self.version = str(data.get('version', '1.0'))

        if 'model_defaults' in data:
            defaults = data['model_defaults'] or {}
            self.defaults = ModelDefaults(
                model=defaults.get('model'),
                temperature=defaults.get('temperature', 0.1),
                max_tokens=defaults.get('max_tokens', 4096),
            )

        if 'prompts' not in data:
            raise PromptSchemaError("Missing 'prompts' section in configuration")

        for prompt_name, prompt_data in data['prompts'].items():
            self._load_prompt(prompt_name, prompt_data)

        for prompt_name in REQUIRED_PROMPTS:
            if prompt_name not in self.prompts:
                raise PromptSchemaError(
                    f"Missing required prompt '{prompt_name}' in configuration"
                )

    def _load_prompt(self, name: str, data: Dict[str, Any]):
        """Load a single prompt template."""
        if not isinstance(data, dict):
            raise PromptSchemaError(f"Prompt '{name}' must be a mapping")

        for field_name in ['name', 'system', 'user']:
            if field_name not in data:
                raise PromptSchemaError(
                    f"Missing required field '{field_name}' in prompt '{name}'"
                )

        self.prompts[name] = PromptTemplate(
            name=data['name'],
            description=data.get('description', ''),
            system=data['system'],
            user=data['user'],
            model=data.get('model', self.defaults.model),
            temperature=data.get('temperature', self.defaults.temperature),
            max_tokens=data.get('max_tokens', self.defaults.max_tokens),
        )

    def get(self, prompt_name: str) -> PromptTemplate:
        """
        Get a prompt template by name.

        Raises:
            KeyError: If prompt not found
        """
        if prompt_name not in self.prompts:
            raise KeyError(
                f"Unknown prompt '{prompt_name}'. "
                f"Available prompts: {self.list_prompts()}"
            )
        return self.prompts[prompt_name]

    def list_prompts(self) -> List[str]:
        return list(self.prompts.keys())


def create_default_prompts_yaml() -> str:
    """
    Create default prompts.yaml content.

    Returns:
        YAML string with default prompts configuration
    """
    return '''# AI Prompt Configuration for the Assessment Generator
# Variables in {{double_braces}} are substituted at runtime

version: "1.0"

model_defaults:
  model: null                    # Use main config default if null
  temperature: 0.1
  max_tokens: 4096

prompts:
  # ============================================================
  # TERM EXTRACTION
  # Called once per assessment to collect vocabulary from the source
  # ============================================================
  term_extraction:
    name: "Extract Source Terms"
    description: "Collects technical terms and definitions from the source material"
    temperature: 0.1
    max_tokens: 4096

    system: |
      You are an expert academic assessment designer. You extract the key
      technical terms, concepts and academic vocabulary that a student must
      know from a piece of course material.

    user: |
      CONTEXT: {{topic}}
      SOURCE MATERIAL: {{source_label}}

      TASK:
      Extract {{term_count}} terms with a short definition for each.

      STRICT GROUNDING RULES:
      1. ONLY use technical terms, key concepts and academic vocabulary found
         directly in the source material.
      2. DO NOT use generic or unrelated words.
      3. Definitions must come from how the source uses the term.
      4. Each term must be a single word of 3-12 letters, uppercase A-Z only,
         no spaces, hyphens or digits.

      SOURCE TEXT (if provided):
      {{content}}

  # ============================================================
  # CROSSWORD LAYOUT
  # Called for each layout attempt; carries the previous failure
  # ============================================================
  crossword_layout:
    name: "Lay Out Crossword"
    description: "Arranges extracted terms into a single connected crossword grid"
    temperature: 0.1
    max_tokens: 8192

    system: |
      You are an expert crossword constructor building an educational
      crossword for an assessment.

    user: |
      CONTEXT: {{topic}}

      Build a crossword with EXACTLY {{word_count}} words chosen ONLY from
      this term list:
      {{term_list}}

      RULES:
      1. Each word is 3-12 uppercase letters (A-Z only).
      2. Write an educational clue for each word based on its definition.
         The clue must not contain the word itself.
      3. "row" and "col" are the zero-based integer coordinates of the
         word's FIRST letter. ACROSS words run to the right (col increases),
         DOWN words run downward (row increases).
      4. Wherever two words share a cell they must have the SAME letter there.
      5. All words must form ONE connected grid: every word must cross at
         least one other word. No isolated words or groups.
      6. Give the crossword a short title and a subject.
      {{fix_request}}
'''
