import json

from loguru import logger
from openai import OpenAI
from pydantic import ValidationError

from ledger.llm.prompts import SYSTEM_PROMPT
from ledger.models.schemas import Classification, OracleResult


def _extract_json(raw: str) -> str:
    """Strip markdown fences and any prose around the JSON object."""
    text = raw.strip()
    if text.startswith("```"):
        lines = [l for l in text.split("\n") if not l.startswith("```")]
        text = "\n".join(lines)
    first, last = text.find("{"), text.rfind("}")
    if first >= 0 and last > first:
        text = text[first : last + 1]
    return text


class ExpenseClassifier:
    """Best-effort record/query/other classification through an LLM."""

    def __init__(self, api_key: str, model: str, base_url: str | None = None):
        self.client = OpenAI(api_key=api_key, base_url=base_url) if api_key else None
        self.model = model

    def classify(self, text: str, hints: dict | None = None) -> OracleResult:
        if self.client is None:
            return OracleResult.failure("no API key configured")

        payload = json.dumps({"text": text, "hints": hints or {}}, ensure_ascii=False)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": payload},
                ],
            )
            raw = response.choices[0].message.content or ""
            logger.debug("LLM raw response: {}", raw)
            classification = Classification.model_validate(json.loads(_extract_json(raw)))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("Failed to parse LLM response: {}", e)
            return OracleResult.failure(f"unparseable response: {e}")
        except Exception as e:
            logger.error("LLM request failed: {}", e)
            return OracleResult.failure(f"request failed: {e}")

        return OracleResult.success(classification)
