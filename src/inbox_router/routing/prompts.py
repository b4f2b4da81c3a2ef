"""Classifier system prompt and per-email user message.

The system prompt is fixed; the user message is assembled per email with
optional sender context.

Usage:
    from inbox_router.routing.prompts import CLASSIFIER_SYSTEM_PROMPT, build_classification_prompt

    message = build_classification_prompt(classification_input)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inbox_router.routing.categories import ClassificationInput

TRUNCATION_MARKER = "\n[... thread truncated ...]"


def build_classification_prompt(
    classification_input: ClassificationInput,
    max_input_chars: int | None = None,
) -> str:
    """Assemble the user message for one email.

    Args:
        classification_input: The email to classify
        max_input_chars: Truncate thread content beyond this many characters

    Returns:
        Complete user message string
    """
    content = classification_input.thread_content or ""
    if max_input_chars is not None and len(content) > max_input_chars:
        content = content[:max_input_chars] + TRUNCATION_MARKER

    sender_name = classification_input.sender_name or "Unknown"
    sender_email = classification_input.sender_email or "unknown"

    parts: list[str] = []
    parts.append("Classify this email:")
    parts.append("")
    parts.append(f"Subject: {classification_input.subject}")
    parts.append(f"From: {sender_name} <{sender_email}>")

    if classification_input.sender_context:
        parts.append("")
        parts.append(f"Sender Context: {classification_input.sender_context}")

    parts.append("")
    parts.append("Email Content:")
    parts.append(content)

    return "\n".join(parts)


CLASSIFIER_SYSTEM_PROMPT = """\
You are an email classification system. Analyze the email and classify it into ONE category.

## Categories

LIGHT TIER (routine - use efficient model):
- routine_reply: Simple acks, "sounds good", scheduling confirmations, thank you notes
- routine_update: FYIs, status updates, newsletters, automated notifications
- needs_attention: Questions needing a thoughtful response, standard requests

FRONTIER TIER (high-stakes - use best reasoning):
- high_stakes_complaint: Frustration signals ("disappointed", "frustrated", "cancel", \
"unacceptable"), negative tone, service issues
- high_stakes_contract: Pricing discussions, renewal terms, contracts, legal language, procurement
- high_stakes_escalation: Executive involvement, formal escalation, CC'd leadership, \
"urgent" with authority
- high_stakes_sensitive: Legal matters, HR issues, confidential information, compliance
- complex_negotiation: Multi-party decisions, competing interests, complex business terms

## Signals to Detect

HIGH-STAKES SIGNALS (trigger frontier model):
- Words: cancel, disappointed, frustrated, urgent, escalate, legal, contract, renewal, \
pricing, confidential
- Patterns: CC'd executives, formal tone shift, threats, ultimatums
- Sentiment: Strong negative emotion, formal complaints, explicit dissatisfaction

ROUTINE SIGNALS (use light model):
- Words: thanks, sounds good, confirmed, FYI, update, newsletter
- Patterns: Auto-generated, simple acknowledgments, scheduling
- Sentiment: Neutral or positive, no tension

## Output Format

Respond with ONLY a JSON object (no markdown, no explanation):
{
  "category": "<category_name>",
  "confidence": <0.0-1.0>,
  "reason": "<one sentence explanation>",
  "signals": ["<signal1>", "<signal2>"]
}\
"""
