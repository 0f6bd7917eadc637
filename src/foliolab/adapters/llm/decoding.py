"""Decoding of provider response envelopes.

Providers wrap their answer differently. Each decoder extracts a candidate
answer from one envelope shape; the first candidate that passes validation
wins.
"""

import json
import re
from typing import Any, Callable, Optional, TypeVar

from foliolab.core.errors import MalformedResponseError

T = TypeVar("T")

Decoder = Callable[[Any], Optional[Any]]


def _wrapped_choices(envelope: Any) -> Optional[Any]:
    """``choices[0].message.content`` of a chat-completion envelope."""
    if not isinstance(envelope, dict) or "choices" not in envelope:
        return None
    choices = envelope["choices"]
    if not isinstance(choices, list) or not choices:
        raise ValueError("response has no choices")
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        raise ValueError("first choice has no message")
    content = message.get("content")
    if content is None or content == "":
        raise ValueError("message has no content")
    return content


def _bare_object(envelope: Any) -> Optional[Any]:
    """The envelope itself is the answer."""
    if isinstance(envelope, dict) and "choices" not in envelope:
        return envelope
    if isinstance(envelope, str):
        return envelope
    return None


DECODERS: tuple[tuple[str, Decoder], ...] = (
    ("wrapped choices[0].message.content", _wrapped_choices),
    ("bare object", _bare_object),
)


def fix_json(text: str) -> str:
    """Remove trailing commas before } or ]."""
    return re.sub(r",(\s*[}\]])", r"\1", text)


def _repair(candidate: str) -> str:
    """Apply ``fix_json`` only to text that does not already parse."""
    try:
        json.loads(candidate)
    except ValueError:
        return fix_json(candidate)
    return candidate


def extract_json(text: str) -> str:
    """Extract a JSON object from a Markdown code block or surrounding prose."""
    code_block = re.search(r"```(?:json)?\s*\n(.*?)\n\s*```", text, re.DOTALL)
    if code_block:
        return _repair(code_block.group(1).strip())

    stripped = text.strip()
    if stripped.startswith("{"):
        return _repair(stripped)

    start, end = stripped.find("{"), stripped.rfind("}")
    if start != -1 and end > start:
        return _repair(stripped[start:end + 1])
    return stripped


def decode_response(envelope: Any, build: Callable[[Any], T], provider: str) -> T:
    """Turn a provider envelope into a validated result.

    Args:
        envelope: Decoded JSON body returned by the provider.
        build: Validating constructor; raises ValueError on a bad shape.
        provider: Provider name used in error messages.

    Raises:
        MalformedResponseError: if no decoder yields a valid result.
    """
    problems = []

    for label, decoder in DECODERS:
        try:
            candidate = decoder(envelope)
            if candidate is None:
                continue
            if isinstance(candidate, str):
                candidate = json.loads(extract_json(candidate))
            return build(candidate)
        except json.JSONDecodeError as e:
            problems.append(f"{label}: content is not valid JSON ({e.msg})")
        except ValueError as e:
            problems.append(f"{label}: {e}")

    detail = "; ".join(problems) if problems else "unrecognized response envelope"
    raise MalformedResponseError(provider, f"Invalid response from {provider}: {detail}")
