from __future__ import annotations

import json
import re
from typing import List, Tuple

MAX_HINTS = 5
MAX_HINT_CHARS = 240


def parse_briefing_response(raw: str) -> Tuple[str, List[str]]:
    """Parse and validate an AI briefing JSON object.

    Expected object with keys:
      - briefing: non-empty string
      - strategyHints: list of strings (``strategy_hints`` also accepted)
    """
    if not raw or not raw.strip():
        raise ValueError("Empty AI response")

    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise ValueError("No JSON object found in AI response")

    obj = json.loads(match.group(0))
    if not isinstance(obj, dict):
        raise ValueError("AI response must be a JSON object")

    briefing_val = obj.get("briefing", "")
    if not isinstance(briefing_val, str) or not briefing_val.strip():
        raise ValueError("'briefing' must be a non-empty string")

    hints_val = obj.get("strategyHints", obj.get("strategy_hints", []))
    if not isinstance(hints_val, list) or not all(isinstance(h, str) for h in hints_val):
        raise ValueError("'strategyHints' must be a list of strings")

    hints = [h.strip()[:MAX_HINT_CHARS] for h in hints_val if h.strip()][:MAX_HINTS]
    return briefing_val.strip(), hints
