# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
AI client for crossword assessment generation using the Claude API.

Sends the two generation requests:
- Term extraction: key terms and definitions from the source material
- Crossword layout: words, clues and grid positions built from those terms

Responses are forced into a JSON schema through a tool call, so the
payload arrives as structured data rather than free text.
"""

import base64
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import anthropic

from models import SourceDocument, TermCandidate
from prompt_loader import PromptLoader


TERM_EXTRACTION = 'term_extraction'
CROSSWORD_LAYOUT = 'crossword_layout'

# Attachment types the API accepts as document blocks
DOCUMENT_MIME_TYPES = {'application/pdf'}

TERMS_SCHEMA = {
    "type": "object",
    "properties": {
        "terms": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "word": {"type": "string"},
                    "definition": {"type": "string"},
                },
                "required": ["word", "definition"],
            },
        },
    },
    "required": ["terms"],
}

CROSSWORD_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "subject": {"type": "string"},
        "questions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "word": {"type": "string"},
                    "clue": {"type": "string"},
                    "direction": {"type": "string", "enum": ["across", "down"]},
                    "row": {"type": "integer"},
                    "col": {"type": "integer"},
                },
                "required": ["word", "clue", "direction", "row", "col"],
            },
        },
    },
    "required": ["title", "subject", "questions"],
}


class AIClientError(Exception):
    """Base class for failures talking to the AI service."""
    pass


class AIRequestError(AIClientError):
    """Raised when the request itself fails (network, API, configuration)."""
    pass


class AIResponseBlockedError(AIClientError):
    """Raised when the response has no usable content (refusal or empty)."""
    pass


class AIResponseFormatError(AIClientError):
    """Raised when the response body cannot be decoded as JSON."""
    pass


@dataclass
class AIResponse:
    """Decoded payload of one AI call."""
    payload: Any
    tokens_used: int = 0
    stop_reason: Optional[str] = None


def format_term_list(terms: Sequence[TermCandidate]) -> str:
    return "\n".join(f"- {t.word}: {t.definition}" for t in terms)


def format_fix_request(feedback: Optional[str]) -> str:
    if not feedback:
        return ""
    return (
        "\nFIX REQUEST: The previous attempt was rejected with this error:\n"
        f"{feedback}\n"
        "Return a corrected crossword that does not have this problem."
    )


class AICrosswordClient:
    """
    Generates crossword terms and layouts using the Claude API.

    All settings are passed in at construction; nothing is read from
    process-wide state.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-sonnet-4-20250514",
        prompt_loader: Optional[PromptLoader] = None,
        client: Optional[Any] = None,
        logger: Optional[logging.Logger] = None,
        request_timeout: float = 120.0
    ):
        """
        Initialize the AI client.

        Args:
            api_key: Anthropic API key
            model: Claude model to use unless a prompt overrides it
            prompt_loader: PromptLoader with the generation prompts
            client: Pre-built Anthropic client (mainly for tests)
            logger: Logger instance (uses module logger if not provided)
            request_timeout: Seconds before the SDK abandons a request
        """
        self.model = model
        self.request_timeout = request_timeout
        self.prompt_loader = prompt_loader or PromptLoader()
        self.logger = logger if logger else logging.getLogger(__name__)

        if client is not None:
            self.client = client
        elif api_key:
            self.client = anthropic.Anthropic(api_key=api_key)
        else:
            self.client = None

        self.stats = {
            "api_calls": 0,
            "tokens_used": 0,
        }

    def is_available(self) -> bool:
        """Check if AI generation is available."""
        return self.client is not None

    def extract_terms(
        self,
        topic: str,
        content: str,
        term_count: int,
        document: Optional[SourceDocument] = None
    ) -> AIResponse:
        """
        Ask for key terms and definitions drawn from the source material.

        Args:
            topic: Assessment topic or context
            content: Source text, already truncated by the caller
            term_count: Number of terms to request
            document: Optional attached source document

        Returns:
            AIResponse whose payload should be {"terms": [...]}
        """
        attach = document is not None and document.mime_type in DOCUMENT_MIME_TYPES
        template = self.prompt_loader.get(TERM_EXTRACTION)
        system_prompt, user_prompt = template.render(
            topic=topic,
            term_count=term_count,
            source_label=(
                "The attached document." if attach else "The provided text below."
            ),
            content=content,
        )

        return self._make_request(
            TERM_EXTRACTION,
            system_prompt,
            user_prompt,
            schema=TERMS_SCHEMA,
            tool_description="Record the extracted terms and their definitions.",
            document=document if attach else None,
            max_tokens=template.max_tokens,
            temperature=template.temperature,
            model=template.model,
        )

    def generate_layout(
        self,
        topic: str,
        terms: Sequence[TermCandidate],
        word_count: int,
        feedback: Optional[str] = None
    ) -> AIResponse:
        """
        Ask for a crossword layout using only the given terms.

        Args:
            topic: Assessment topic or context
            terms: Extracted terms with definitions
            word_count: Exact number of words requested
            feedback: Error from the previous attempt, sent as a fix request

        Returns:
            AIResponse whose payload should be {title, subject, questions}
        """
        template = self.prompt_loader.get(CROSSWORD_LAYOUT)
        system_prompt, user_prompt = template.render(
            topic=topic,
            word_count=word_count,
            term_list=format_term_list(terms),
            fix_request=format_fix_request(feedback),
        )

        return self._make_request(
            CROSSWORD_LAYOUT,
            system_prompt,
            user_prompt,
            schema=CROSSWORD_SCHEMA,
            tool_description="Record the finished crossword layout.",
            max_tokens=template.max_tokens,
            temperature=template.temperature,
            model=template.model,
        )

    def _make_request(
        self,
        prompt_type: str,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        tool_description: str,
        document: Optional[SourceDocument] = None,
        max_tokens: int = 4096,
        temperature: float = 0.1,
        model: Optional[str] = None
    ) -> AIResponse:
        """
        Make one schema-constrained API request.

        Raises:
            AIRequestError: If the client is missing or the API call fails
            AIResponseBlockedError: If the response has no usable content
            AIResponseFormatError: If free text in the response is not JSON
        """
        if not self.client:
            raise AIRequestError("AI client is not configured (missing API key)")

        content: List[Dict[str, Any]] = []
        if document is not None:
            content.append({
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": document.mime_type,
                    "data": base64.b64encode(document.data).decode('ascii'),
                },
            })
        content.append({"type": "text", "text": user_prompt})

        self.logger.debug(
            f"AI request {prompt_type}: {len(user_prompt)} prompt chars, "
            f"attachment={document is not None}"
        )

        try:
            self.stats["api_calls"] += 1
            response = self.client.messages.create(
                model=model or self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": content}],
                tools=[{
                    "name": prompt_type,
                    "description": tool_description,
                    "input_schema": schema,
                }],
                tool_choice={"type": "tool", "name": prompt_type},
                timeout=self.request_timeout,
            )
        except anthropic.APIError as e:
            raise AIRequestError(f"AI request failed: {e}") from e

        tokens = response.usage.input_tokens + response.usage.output_tokens
        self.stats["tokens_used"] += tokens

        payload = self._extract_payload(response)
        return AIResponse(
            payload=payload,
            tokens_used=tokens,
            stop_reason=response.stop_reason,
        )

    def _extract_payload(self, response: Any) -> Any:
        """Pull the structured payload out of a Messages API response."""
        if response.stop_reason == "refusal":
            raise AIResponseBlockedError("AI declined to answer (refusal)")

        texts = []
        for block in response.content or []:
            if block.type == "tool_use":
                return block.input
            if block.type == "text" and block.text:
                texts.append(block.text)

        text = "".join(texts).strip()
        if not text:
            raise AIResponseBlockedError("No response from AI")

        # Fall back to JSON embedded in free text
        json_match = re.search(r'[\{\[].*[\}\]]', text, re.DOTALL)
        try:
            return json.loads(json_match.group() if json_match else text)
        except json.JSONDecodeError as e:
            raise AIResponseFormatError(f"AI response is not valid JSON: {e}") from e

    def get_stats(self) -> Dict:
        """Get usage statistics."""
        return self.stats.copy()
