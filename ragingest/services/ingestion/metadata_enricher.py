"""LLM-derived title / category / department for free-text documents.

Uses an :class:`~ragingest.interfaces.llm_provider.ILLMProvider` to
classify a document from its name and a short content preview.  The model
is asked for a bare JSON object; responses wrapped in markdown fences or
surrounded by prose are tolerated.

The enricher never raises.  Any failure (LLM error, timeout, unparsable
reply) falls back to ``{title: <document name>, category: "General",
department: "Support"}`` and returns a result flagged ``degraded`` so the
fallback shows up in logs without interrupting ingestion.
"""

from __future__ import annotations

import asyncio
import json
import re
from datetime import date
from typing import TYPE_CHECKING, Any

import structlog

from ragingest.models.ingest import DocumentMetadata, EnrichmentResult

if TYPE_CHECKING:
    from ragingest.interfaces.llm_provider import ILLMProvider

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_CATEGORY = "General"
_DEFAULT_DEPARTMENT = "Support"
_DEFAULT_TIMEOUT = 30.0

_SYSTEM_PROMPT = (
    "You classify uploaded documents for a knowledge base. "
    "Reply with a single JSON object and nothing else."
)

_USER_PROMPT = """\
Analyze this document and provide:
1. A brief title (max 10 words) that captures the essence
2. A category (1-2 words like "Technical", "Report", "Documentation", etc.)
3. A department (1-2 words like "Engineering", "Sales", "Support", etc.)

Document name: {name}
Content preview: {preview}...

Respond ONLY with a JSON object in this format:
{{"title": "...", "category": "...", "department": "..."}}"""

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def parse_metadata_response(response: str) -> dict[str, Any] | None:
    """Extract a JSON object from an LLM reply.

    Handles clean JSON, markdown-fenced JSON and JSON embedded in prose.
    Returns ``None`` when no object can be parsed.
    """
    cleaned = response.strip()

    fence_match = _FENCE_RE.search(cleaned)
    if fence_match:
        cleaned = fence_match.group(1).strip()
    else:
        brace_start = cleaned.find("{")
        brace_end = cleaned.rfind("}")
        if brace_start != -1 and brace_end > brace_start:
            cleaned = cleaned[brace_start : brace_end + 1]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _text_value(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class MetadataEnricher:
    """Classifies free-text documents with one LLM call each.

    Parameters
    ----------
    llm:
        Provider used for the classification prompt.  When ``None`` every
        call returns the degraded default.
    timeout:
        Upper bound in seconds on a single LLM call.
    """

    def __init__(self, llm: ILLMProvider | None, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._llm = llm
        self._timeout = timeout

    async def enrich(
        self,
        document_name: str,
        content_preview: str,
        today: date | None = None,
    ) -> EnrichmentResult:
        """Return metadata for *document_name*; never raises."""
        effective_date = today or date.today()
        fallback = DocumentMetadata(
            title=document_name,
            category=_DEFAULT_CATEGORY,
            department=_DEFAULT_DEPARTMENT,
            effective_date=effective_date,
        )

        if self._llm is None:
            return self._degraded(document_name, fallback, "no LLM provider configured")

        prompt = _USER_PROMPT.format(name=document_name, preview=content_preview)
        try:
            response = await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=_SYSTEM_PROMPT,
                    user_prompt=prompt,
                    temperature=0.3,
                    max_tokens=200,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            return self._degraded(document_name, fallback, f"timed out after {self._timeout:g}s")
        except Exception as exc:  # noqa: BLE001
            return self._degraded(document_name, fallback, str(exc))

        data = parse_metadata_response(response)
        if data is None:
            return self._degraded(document_name, fallback, "unparsable response")

        # Missing keys keep their defaults; present ones override.
        metadata = DocumentMetadata(
            title=_text_value(data, "title") or fallback.title,
            category=_text_value(data, "category") or fallback.category,
            department=_text_value(data, "department") or fallback.department,
            effective_date=effective_date,
        )
        missing = [k for k in ("title", "category", "department") if _text_value(data, k) is None]
        if missing:
            logger.warning(
                "metadata_enrichment_partial",
                document_name=document_name,
                missing=missing,
            )
            return EnrichmentResult(
                metadata=metadata,
                degraded=True,
                reason=f"missing keys: {', '.join(missing)}",
            )

        logger.info(
            "metadata_enriched",
            document_name=document_name,
            title=metadata.title,
            category=metadata.category,
            department=metadata.department,
        )
        return EnrichmentResult(metadata=metadata)

    @staticmethod
    def _degraded(document_name: str, fallback: DocumentMetadata, reason: str) -> EnrichmentResult:
        logger.warning(
            "metadata_enrichment_failed",
            document_name=document_name,
            reason=reason,
            msg="Using default metadata, ingestion continues.",
        )
        return EnrichmentResult(metadata=fallback, degraded=True, reason=reason)
