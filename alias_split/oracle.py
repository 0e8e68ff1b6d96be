"""
Oracle fallback for alias-split.

The oracle is the external translation service consulted only for tokens
the dictionary could not resolve and the cost guard did not drop. Any
object with an async suggest(name, unknown_tokens) method works; two
implementations are provided:

- HttpOracle: OpenAI-compatible chat completions over httpx
- MappingOracle: answers from a fixed mapping (offline use, tests)

query_oracle() wraps every call: it applies the timeout, turns any failure
into an empty answer, normalizes keys and drops answers below the
confidence threshold. Callers never see an oracle exception.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

import httpx

from alias_split.errors import OracleError, OracleTimeoutError

logger = logging.getLogger(__name__)

# Confidence given to answers that arrive as bare strings
DEFAULT_ANSWER_CONFIDENCE = 0.9


@dataclass(slots=True, frozen=True)
class OracleAnswer:
    alias: str
    confidence: float = DEFAULT_ANSWER_CONFIDENCE


class Oracle(Protocol):
    """Anything that can suggest aliases for unknown tokens."""

    async def suggest(self, name: str, unknown_tokens: Sequence[str]) -> Mapping[str, Any]:
        """
        Suggest aliases for unknown tokens.

        Args:
            name: The full file name, for context
            unknown_tokens: Lower-cased tokens to translate

        Returns:
            token -> alias string, or token -> {"alias": ..., "confidence": ...}.
            May cover a subset of the tokens, and may add phrase keys.
        """
        ...


# ============================================================================
# Response Parsing
# ============================================================================

def _extract_json(text: str) -> Dict[str, Any]:
    """
    Extract a JSON object from text that may contain markdown fences or prose.

    Raises:
        OracleError: If no JSON object can be found
    """
    cleaned = re.sub(r"```(?:json)?\s*", "", text).strip()
    try:
        data = json.loads(cleaned)
        if isinstance(data, dict):
            return data
    except json.JSONDecodeError:
        pass

    match = re.search(r"\{[\s\S]*\}", cleaned)
    if match:
        try:
            data = json.loads(match.group())
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass

    raise OracleError(f"No JSON object in oracle response: {text[:200]}")


# ============================================================================
# HTTP Oracle
# ============================================================================

SYSTEM_PROMPT = """You translate file-name words into Chinese, word for word.

Rules:
1. Output a single JSON object and nothing else
2. Keys are the English words or phrases, lower case
3. Values are the Chinese words, with no suffixes and no explanations
4. Translate literally and keep the original meaning
5. If adjacent words form a phrase, add the phrase as its own key
6. Never add separators inside a translation

Example output:
{"element": "元素", "hierarchy": "层级", "element hierarchy": "元素层级"}"""


class HttpOracle:
    """Oracle backed by an OpenAI-compatible chat completions endpoint."""

    def __init__(self, base_url: str, api_key: str, model: str, timeout: float = 15.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def build_messages(self, name: str, unknown_tokens: Sequence[str]):
        prompt = (
            f"File name: {name}\n"
            f"Unknown words: {', '.join(unknown_tokens)}\n\n"
            "Translate these words. If some adjacent words form a phrase, "
            "translate the phrase as well."
        )
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    async def suggest(self, name: str, unknown_tokens: Sequence[str]) -> Dict[str, Any]:
        """
        Ask the endpoint for token translations.

        Raises:
            OracleTimeoutError: If the request times out
            OracleError: On HTTP errors or an unusable response
        """
        payload = {
            "model": self.model,
            "messages": self.build_messages(name, unknown_tokens),
            "temperature": 0.3,
            "max_tokens": 500,
            "stream": False,
            "response_format": {"type": "json_object"},
        }

        try:
            async with self._make_client() as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
                resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise OracleTimeoutError(f"Oracle request timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise OracleError(
                f"Oracle HTTP error {exc.response.status_code}: {exc.response.text[:300]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise OracleError(f"Oracle request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise OracleError("Oracle response is not JSON") from exc

        if not isinstance(data, dict):
            raise OracleError("Oracle response is not a JSON object")
        choices = data.get("choices") or []
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise OracleError("Empty choices in oracle response")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise OracleError("No message in oracle response")
        content = message.get("content") or ""
        if not isinstance(content, str) or not content:
            raise OracleError("Empty content in oracle response")

        return _extract_json(content)


# ============================================================================
# Mapping Oracle
# ============================================================================

class MappingOracle:
    """
    Oracle answering from a fixed token -> alias mapping.

    Counts calls, so callers can check that a cached answer avoided one.
    """

    def __init__(self, mapping: Mapping[str, Any]):
        self.mapping = {str(k).lower(): v for k, v in mapping.items()}
        self.calls = 0

    async def suggest(self, name: str, unknown_tokens: Sequence[str]) -> Dict[str, Any]:
        self.calls += 1
        return {t: self.mapping[t] for t in unknown_tokens if t in self.mapping}


# ============================================================================
# Safe Query
# ============================================================================

def _normalize_answer(value: Any) -> Optional[OracleAnswer]:
    if isinstance(value, str):
        alias = value.strip()
        return OracleAnswer(alias) if alias else None
    if isinstance(value, Mapping) and isinstance(value.get("alias"), str):
        alias = value["alias"].strip()
        confidence = value.get("confidence", DEFAULT_ANSWER_CONFIDENCE)
        if not alias or isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            return None
        return OracleAnswer(alias, min(1.0, max(0.0, float(confidence))))
    return None


async def query_oracle(
    oracle: Oracle,
    name: str,
    tokens: Sequence[str],
    timeout: float,
    min_confidence: float = 0.0,
) -> Dict[str, OracleAnswer]:
    """
    Call the oracle with a timeout and error isolation.

    Failures, timeouts and malformed responses all yield {}. Answers are
    keyed by lower-cased, whitespace-collapsed token; malformed entries and
    answers below min_confidence are dropped. Tokens the oracle did not
    answer are logged, not retried.

    Args:
        oracle: The oracle to ask
        name: Full file name
        tokens: Tokens to translate
        timeout: Seconds before the call is cancelled
        min_confidence: Threshold for accepting an answer

    Returns:
        token -> OracleAnswer
    """
    if not tokens:
        return {}

    try:
        raw = await asyncio.wait_for(oracle.suggest(name, list(tokens)), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Oracle timed out after {timeout}s for {name}")
        return {}
    except (OracleError, httpx.HTTPError) as e:
        logger.warning(f"Oracle failed for {name}: {e}")
        return {}
    except (ValueError, TypeError) as e:
        logger.warning(f"Oracle returned an unusable response for {name}: {e}")
        return {}
    except Exception as e:
        # An unavailable oracle degrades to the dictionary-only alias
        logger.warning(f"Oracle unavailable for {name}: {e!r}")
        return {}

    if not isinstance(raw, Mapping):
        logger.warning(f"Oracle returned {type(raw).__name__} instead of a mapping for {name}")
        return {}

    answers: Dict[str, OracleAnswer] = {}
    for key, value in raw.items():
        token = ' '.join(str(key).lower().split())
        answer = _normalize_answer(value)
        if not token or answer is None:
            logger.warning(f"Ignoring malformed oracle answer {key!r}: {value!r}")
            continue
        if answer.confidence < min_confidence:
            logger.debug(f"Oracle answer for {token!r} below threshold ({answer.confidence})")
            continue
        answers[token] = answer

    missing = [t for t in tokens if t.lower() not in answers]
    if missing:
        logger.warning(f"Oracle alignment mismatch for {name}: no answer for {missing}")

    return answers
