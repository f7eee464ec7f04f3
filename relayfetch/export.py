"""
Result Export Module

Write fetch outcomes to JSON or JSON Lines files.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import aiofiles

from relayfetch.models import FetchOutcome


def outcome_to_record(outcome: FetchOutcome) -> Dict[str, Any]:
    """Flatten a FetchOutcome into a JSON-serializable dict."""
    return {
        "url": outcome.url,
        "success": outcome.success,
        "kind": outcome.kind.value,
        "via_relay": outcome.via_relay,
        "credential_index": outcome.credential_index,
        "attempts": outcome.attempts,
        "error": str(outcome.error) if outcome.error else None,
        "response": outcome.response.model_dump(mode="json") if outcome.response else None,
    }


class JSONExporter:
    """
    Export records to JSON format.

    Example:
        exporter = JSONExporter(jsonl=True)
        filepath = await exporter.export(records, "results.jsonl")
    """

    def __init__(
        self,
        pretty: bool = True,
        jsonl: bool = False,
    ):
        """
        Initialize JSON exporter.

        Args:
            pretty: Pretty-print JSON (ignored if jsonl=True)
            jsonl: Export as JSON Lines (one object per line)
        """
        self._pretty = pretty
        self._jsonl = jsonl

    async def export(
        self,
        data: List[Dict[str, Any]],
        filename: str | Path,
    ) -> str:
        """Export data to a JSON file, creating parent directories."""
        filepath = Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(filepath, "w", encoding="utf-8") as f:
            if self._jsonl:
                for item in data:
                    await f.write(json.dumps(item, ensure_ascii=False, default=str) + "\n")
            else:
                indent = 2 if self._pretty else None
                await f.write(json.dumps(
                    data,
                    indent=indent,
                    ensure_ascii=False,
                    default=str,
                ))

        return str(filepath)
