"""
Tessa Backend — Structured Analysis Service
=============================================

What:  Second stage of the audio pipeline: turns a transcript into a title,
       keywords and a summary using Gemini in JSON mode.
Who:   AudioAnalysisAgent, after a non-empty transcript was produced.

Output Contract (enforced by parse_analysis):
    - Response must be a JSON object (code fences tolerated)
    - title, keywords, summary must be present and non-empty
    - title is cut to 100 characters
    - transcript is always the transcript that was sent, never the model's copy
"""

import json
import logging
from typing import Any, List, Optional

from tessa.config import settings
from tessa.exceptions import IncompleteAnalysisError, NoModelOutputError
from tessa.schemas.audio import AudioAnalysisResult
from tessa.services.gemini_service import GeminiClient
from tessa.services.llm_base import AnalysisGenerator

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100

SYSTEM_PROMPT = """You are an expert audio content analyzer. Analyze the provided transcript and extract:
1. A clear, descriptive title (max 100 characters)
2. 5-10 key topics and themes as keywords (single words or short phrases)
3. A comprehensive summary (3-5 sentences capturing main points)

Return your analysis in JSON format with this exact structure:
{
  "title": "descriptive title here",
  "keywords": ["keyword1", "keyword2", ...],
  "transcript": "the full original transcript",
  "summary": "comprehensive summary here"
}"""


def analysis_prompt(transcript: str, filename: str) -> str:
    return f'Analyze this audio transcript from file "{filename}":\n\n{transcript}'


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code fences and cut to the outermost braces."""
    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start : end + 1]
    return cleaned


def _clean_keywords(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return []
    return [str(k).strip() for k in value if str(k).strip()]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_analysis(raw: str, transcript: str) -> AudioAnalysisResult:
    """
    Validates a raw model response into an AudioAnalysisResult.

    Raises:
        NoModelOutputError: empty response, invalid JSON, or not an object
        IncompleteAnalysisError: title, keywords or summary missing/empty
    """
    if not raw or not raw.strip():
        raise NoModelOutputError(message="No response from analysis model")

    try:
        data = json.loads(_clean_json_payload(raw))
    except json.JSONDecodeError as e:
        raise NoModelOutputError(
            message="Analysis model returned invalid JSON",
            context={"error": str(e)},
        )
    if not isinstance(data, dict):
        raise NoModelOutputError(
            message="Analysis model returned JSON that is not an object",
            context={"type": type(data).__name__},
        )

    result = AudioAnalysisResult(
        title=_text(data.get("title"))[:MAX_TITLE_LENGTH].strip(),
        keywords=_clean_keywords(data.get("keywords")),
        transcript=transcript,
        summary=_text(data.get("summary")),
    )

    # transcript comes from the caller; only the model's fields are checked here
    missing = [f for f in result.missing_fields() if f != "transcript"]
    if missing:
        raise IncompleteAnalysisError(missing_fields=missing)
    return result


class GeminiAnalysisService(AnalysisGenerator):
    def __init__(
        self,
        client: GeminiClient,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.client = client
        self.model_name = model_name or settings.gemini_analysis_model
        self.temperature = settings.analysis_temperature if temperature is None else temperature

    async def analyze(self, transcript: str, filename: str) -> AudioAnalysisResult:
        raw = await self.client.generate(
            self.model_name,
            [analysis_prompt(transcript, filename)],
            system_instruction=SYSTEM_PROMPT,
            generation_config={
                "response_mime_type": "application/json",
                "temperature": self.temperature,
            },
        )
        result = parse_analysis(raw, transcript)
        logger.info(
            "Analyzed %s: title=%d chars, %d keywords",
            filename,
            len(result.title),
            len(result.keywords),
        )
        return result
