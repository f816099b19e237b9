#!/usr/bin/env python3
# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

"""
Crossword Assessment Generator

Builds a crossword assessment from course material:
1. Extract text from the uploaded document (pdf, doc, docx, ppt, pptx)
2. Ask the AI (Claude API) for key terms from the material
3. Ask the AI to lay the terms out as a crossword, validating and retrying
4. Store the assessment and its questions for students to solve

Usage:
    # From a document:
    autocross --topic "Cell Biology" --source lecture3.pdf --count 10

    # With YAML configuration:
    autocross --config assessment.yaml
"""

import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional, Tuple

from ai_client import AICrosswordClient
from assessment_store import AssessmentStore, StoreError
from config import (
    AssessmentConfig, ConfigValidationError, create_argument_parser,
    discover_api_key, get_model, load_config,
)
from crossword_orchestrator import (
    CrosswordOrchestrator, ExtractionError, GenerationExhaustedError,
)
from document_extractor import (
    DocumentExtractionError, UnsupportedDocumentError, extract_file,
    mime_type_for,
)
from logging_config import setup_logging
from models import CrosswordResult, GenerationRequest, SourceDocument
from prompt_loader import PromptLoader, PromptRenderError, PromptSchemaError
from validator import grid_stats, validate_crossword


class AssessmentGenerator:
    """
    Wires configuration, AI client, orchestrator and store together.

    Workflow:
    1. Build the generation request from text and/or a source document
    2. Run the orchestrator (term extraction, then layout attempts)
    3. Store the assessment with its questions
    """

    def __init__(
        self,
        config: AssessmentConfig,
        ai_client: Optional[AICrosswordClient] = None,
        store: Optional[AssessmentStore] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the generator.

        Args:
            config: AssessmentConfig instance with all settings
            ai_client: Pre-built AI client (built from config if omitted)
            store: Record store (opened from config.storage.path if omitted)
            sleep: Backoff function passed to the orchestrator
        """
        self.config = config
        self.logger = logging.getLogger(__name__)

        if ai_client is None:
            prompt_loader = PromptLoader(config.ai.prompt_config)
            ai_client = AICrosswordClient(
                api_key=discover_api_key(config),
                model=get_model(config),
                prompt_loader=prompt_loader,
                logger=self.logger,
                request_timeout=config.generation.attempt_timeout_seconds,
            )
        self.ai = ai_client

        if not self.ai.is_available():
            raise ConfigValidationError(
                "AI generation requires an API key. Provide one via:\n"
                "  - --api-key CLI argument\n"
                "  - ai.api_key in the configuration file\n"
                f"  - {config.ai.api_key_env} environment variable"
            )

        self.orchestrator = CrosswordOrchestrator(
            self.ai,
            settings=config.generation,
            sleep=sleep,
        )
        self.store = store if store is not None else AssessmentStore(config.storage.path)

    def build_request(self) -> GenerationRequest:
        """
        Collect source text and the optional attachment.

        A document that cannot be parsed locally is still attached, so
        the AI can read it directly when its format allows.

        Raises:
            UnsupportedDocumentError: If the source file type is unsupported
            ConfigValidationError: If there is no source material at all
        """
        content = self.config.content or ""
        document = None

        if self.config.source_file:
            path = Path(self.config.source_file)
            mime_type = mime_type_for(path.suffix)
            try:
                extracted = extract_file(path)
                self.logger.info(
                    f"   - Extracted {len(extracted.text)} characters "
                    f"from {path.name}"
                )
                content = "\n\n".join(t for t in (content, extracted.text) if t.strip())
            except UnsupportedDocumentError:
                raise
            except DocumentExtractionError as e:
                self.logger.warning(f"Local parsing failed, sending file only: {e}")
            document = SourceDocument(
                data=path.read_bytes(),
                mime_type=mime_type,
                filename=path.name,
            )

        if not content.strip() and document is None:
            raise ConfigValidationError(
                "No source material: provide --text or --source"
            )

        return GenerationRequest(
            topic=self.config.topic,
            content=content,
            word_count=self.config.generation.word_count,
            document=document,
        )

    def generate(self) -> Tuple[str, CrosswordResult]:
        """
        Generate and store one assessment.

        Returns:
            (assessment id, crossword result)

        Raises:
            ExtractionError: If term extraction fails
            GenerationExhaustedError: If no valid layout was produced
        """
        start_time = time.time()
        self.logger.info("=" * 60)
        self.logger.info("CROSSWORD ASSESSMENT GENERATOR")
        self.logger.info("=" * 60)
        self.logger.info(f"   Topic: {self.config.topic}")
        self.logger.info(f"   Faculty: {self.config.faculty_name}")
        self.logger.info(f"   Words: {self.config.generation.word_count}")

        request = self.build_request()
        result = self.orchestrator.generate(request)

        assessment_id = self.store.create_assessment(
            title=result.title,
            subject=result.subject,
            faculty_name=self.config.faculty_name,
            questions=result.questions,
            deadline=self.config.deadline,
            class_section=self.config.class_section,
        )

        grid = validate_crossword(result)
        stats = grid_stats(grid)
        elapsed = time.time() - start_time
        self.logger.info("=" * 60)
        self.logger.info("GENERATION COMPLETE!")
        self.logger.info("=" * 60)
        self.logger.info(f"   Assessment id: {assessment_id}")
        self.logger.info(
            f"   Grid: {stats['width']}x{stats['height']}, "
            f"{stats['occupied_cells']} letters"
        )
        self.logger.info(f"   AI stats: {self.ai.get_stats()}")
        self.logger.info(f"   Store: {self.store.summary()}")
        self.logger.info(f"Generation time: {elapsed:.2f} seconds")

        return assessment_id, result


def format_clues(result: CrosswordResult) -> str:
    """Numbered clue listing in question order."""
    lines = []
    for number, placed in enumerate(result.questions, start=1):
        lines.append(
            f"{number:2d}. [{placed.direction.value.upper():6s} "
            f"r{placed.row} c{placed.col}] {placed.word} - {placed.clue}"
        )
    return "\n".join(lines)


def main():
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        config = load_config(args)

        if args.dry_run:
            print("Configuration valid:")
            print(f"  Topic: {config.topic}")
            print(f"  Faculty: {config.faculty_name}")
            print(f"  Source file: {config.source_file or '(none)'}")
            print(f"  Words: {config.generation.word_count}")
            print(f"  Max retries: {config.generation.max_retries}")
            print(f"  Store: {config.storage.path}")
            return

        setup_logging(
            output_dir=config.output.directory,
            log_level=config.output.log_level,
            log_file_prefix=config.output.log_file_prefix,
            enable_console=config.output.enable_console_logging,
        )

        generator = AssessmentGenerator(config)
        assessment_id, result = generator.generate()

        print(f"\nAssessment created: {assessment_id}")
        print(f"{result.title} ({result.subject})\n")
        print(validate_crossword(result).to_string())
        print()
        print(format_clues(result))

    except (ConfigValidationError, PromptSchemaError, PromptRenderError) as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except (ExtractionError, GenerationExhaustedError) as e:
        print(f"Generation failed: {e}")
        sys.exit(1)
    except (DocumentExtractionError, StoreError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nGeneration cancelled.")
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
