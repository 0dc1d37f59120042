"""Validate tool - ask an LLM to accept or reject detected items.

The model may only reject. Anything that prevents a trustworthy verdict
(no key, API error, malformed or non-conserving response) falls back to the
parser counts with fallback=True.
"""

import json
import logging
import os
import time
from typing import Any

import httpx
from openai import OpenAI
from pydantic import ValidationError

from ..config.loader import Config
from ..models.parser_output import ParserOutput
from ..models.validated_counts import (
    ValidatedCounts,
    ValidationResponse,
    VALIDATED_CATEGORIES,
)

logger = logging.getLogger(__name__)


class InvalidValidationResponse(ValueError):
    """Validator output that does not match the expected shape or counts."""


SYSTEM_PROMPT = """You are a content quality validator for an SEO scoring system.
You validate items that a pattern-matching parser detected on a web page.
You can ONLY REJECT items that do not meet the criteria. You can NEVER add items.

CRITICAL: Return ONLY valid JSON. No markdown code blocks, no text before or after the JSON."""

CRITERIA = """# VALIDATION CRITERIA

## expert_quotes - must have:
1. A specific person name (first and last name, or a recognizable public figure)
2. A title, function or organization
3. A verbatim quote, not a paraphrase
REJECT generic attributions ("experts say", "studies show"), missing names, paraphrases.

## statistics - must have:
1. A specific number or percentage
2. A clear source (organization, publication) and a year or date
3. Context that makes the figure meaningful
REJECT unsourced figures, undated data, marketing fluff, numbers that are not statistics.

## sources - must be:
1. A link to an identifiable publisher, organization or publication
2. Cited in support of a claim, not navigation, advertising or social profiles

## case_studies - must have:
1. A named subject (company or client; "Company X" only if explicitly a case study)
2. Concrete, quantified results (%, currency, time)
3. A real outcome, not a hypothetical ("could", "might", "would")
REJECT generic examples, testimonials without metrics, hypothetical scenarios.

## faq - must have:
1. A real question
2. An answer of at least 20 substantive words that directly answers it
3. Relevance to the page topic"""

USER_PROMPT_TEMPLATE = """# PARSER DETECTED

Page: {url}
Title: {title}

{sections}

{criteria}

# RESPONSE FORMAT

Return ONLY this JSON object:
{{
  "expert_quotes": {{"validated": <int>, "rejected": [{{"index": <int>, "reason": "<brief reason>"}}]}},
  "statistics": {{"validated": <int>, "rejected": [...]}},
  "sources": {{"validated": <int>, "rejected": [...]}},
  "case_studies": {{"validated": <int>, "rejected": [...]}},
  "faq": {{"validated": <int>, "rejected": [...]}}
}}

RULES:
- "index" is the 0-based position of the item in the list shown for that category.
- For every category, validated + len(rejected) MUST equal the detected count.
- Items beyond the listed sample cannot be inspected: count them as validated.
- Be strict but fair, and use brief, specific rejection reasons."""


def _format_items(category: str, parser_output: ParserOutput) -> list[str]:
    items = getattr(parser_output.snippets, category)
    lines = []
    for i, item in enumerate(items):
        if category == "expert_quotes":
            lines.append(f"[{i}] \"{item.text}\" - {item.attribution or '(no attribution)'}")
        elif category == "sources":
            lines.append(f"[{i}] {item.text} ({item.url})")
        elif category == "faq":
            lines.append(f"[{i}] Q: {item.text}\n    A: {item.answer} ({item.answer_words} words)")
        else:
            lines.append(f"[{i}] {item.text}")
    return lines


def build_validation_prompt(parser_output: ParserOutput) -> str:
    """User prompt listing every snippet per category with its detected count."""
    sections = []
    for category in VALIDATED_CATEGORIES:
        detected = parser_output.counts.detected(category)
        lines = _format_items(category, parser_output)
        header = f"## {category} ({detected} detected, {len(lines)} shown)"
        sections.append("\n".join([header] + (lines or ["(none)"])))
    return USER_PROMPT_TEMPLATE.format(
        url=parser_output.url,
        title=parser_output.metadata.title,
        sections="\n\n".join(sections),
        criteria=CRITERIA,
    )


def extract_json_object(content: str) -> str:
    """Strip markdown fences and surrounding prose, keep the first balanced {...}."""
    raw = content.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else raw[3:]
    if raw.endswith("```"):
        raw = raw.rsplit("```", 1)[0].strip()

    start_idx = raw.find("{")
    if start_idx >= 0:
        brace_count = 0
        for i in range(start_idx, len(raw)):
            if raw[i] == "{":
                brace_count += 1
            elif raw[i] == "}":
                brace_count -= 1
                if brace_count == 0:
                    return raw[start_idx:i + 1]
    return raw


def parse_validation_response(content: str | None, parser_output: ParserOutput) -> ValidatedCounts:
    """
    Parse and check a validator response.
    Raises InvalidValidationResponse when the shape or the counts do not hold.
    """
    if not content or not content.strip():
        raise InvalidValidationResponse("Empty response from validator")
    try:
        data = json.loads(extract_json_object(content))
        response = ValidationResponse.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise InvalidValidationResponse(f"Malformed validator response: {str(e)[:200]}") from e

    for category in VALIDATED_CATEGORIES:
        verdict = getattr(response, category)
        detected = parser_output.counts.detected(category)
        if verdict.validated > detected:
            raise InvalidValidationResponse(
                f"{category}: validated {verdict.validated} exceeds detected {detected}"
            )
        if verdict.validated + len(verdict.rejected) != detected:
            raise InvalidValidationResponse(
                f"{category}: validated {verdict.validated} + rejected "
                f"{len(verdict.rejected)} != detected {detected}"
            )
        shown = len(getattr(parser_output.snippets, category))
        indexes = [r.index for r in verdict.rejected]
        if len(set(indexes)) != len(indexes) or any(i >= shown for i in indexes):
            raise InvalidValidationResponse(f"{category}: invalid rejection indexes {indexes}")

    return ValidatedCounts.from_response(response)


def _build_client(config: Config, api_key: str) -> OpenAI:
    validator_config = config.validator
    # Disable proxy usage for OpenAI client (trust_env=False)
    return OpenAI(
        api_key=api_key,
        base_url=validator_config.base_url,
        http_client=httpx.Client(trust_env=False, timeout=validator_config.timeout_seconds),
    )


def build_validator_client(config: Config) -> OpenAI | None:
    """
    One OpenAI client to share across scans; None when validation is off
    or no API key is configured. The caller closes it.
    """
    if not config.validator.enabled:
        return None
    api_key = os.environ.get(config.validator.api_key_env, "")
    if not api_key:
        return None
    return _build_client(config, api_key)


def _fallback(parser_output: ParserOutput, reason: str) -> ValidatedCounts:
    logger.warning("Validation fallback for %s: %s", parser_output.url, reason)
    return ValidatedCounts.from_parser_counts(parser_output.counts, reason)


def _complete(client: Any, parser_output: ParserOutput, config: Config) -> str | None:
    validator_config = config.validator
    create_params = {
        "model": validator_config.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_validation_prompt(parser_output)},
        ],
        "max_tokens": validator_config.max_tokens,
        "temperature": validator_config.temperature,
    }
    start_time = time.time()
    logger.debug("Calling validator for %s...", parser_output.url)
    response = client.chat.completions.create(**create_params)
    elapsed = time.time() - start_time
    logger.info("Validator call completed in %.2fs for %s", elapsed, parser_output.url)
    return response.choices[0].message.content


def validate_tool(
    parser_output: ParserOutput,
    config: Config,
    client: Any = None,
) -> ValidatedCounts:
    """
    Validate detected expert quotes, statistics, sources, case studies and FAQ.
    `client` is any object exposing chat.completions.create (OpenAI SDK shape).
    Without one, a client is built for this call and closed afterwards.
    """
    if not parser_output.success:
        return _fallback(parser_output, f"Parse failed: {parser_output.error}")
    if not config.validator.enabled:
        return _fallback(parser_output, "Validation disabled")
    if all(parser_output.counts.detected(cat) == 0 for cat in VALIDATED_CATEGORIES):
        # Nothing to judge; an empty verdict is exact, not a fallback
        return ValidatedCounts(fallback=False)

    owned = client is None
    if owned:
        client = build_validator_client(config)
        if client is None:
            return _fallback(parser_output, "No validator API key configured")

    try:
        content = _complete(client, parser_output, config)
    except Exception as e:
        logger.error("Validator API error: %s: %s", type(e).__name__, e, exc_info=True)
        return _fallback(parser_output, f"Validator error ({type(e).__name__}): {e}")
    finally:
        if owned:
            client.close()

    try:
        validated = parse_validation_response(content, parser_output)
    except InvalidValidationResponse as e:
        logger.debug("Validator response (first 500 chars): %s", (content or "")[:500])
        return _fallback(parser_output, str(e))

    for category in VALIDATED_CATEGORIES:
        logger.info(
            "Validated %d/%d %s for %s",
            getattr(validated, category),
            parser_output.counts.detected(category),
            category,
            parser_output.url,
        )
    return validated
