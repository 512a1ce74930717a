import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from resumehub.core.exceptions import (
    AIConfigurationError,
    MalformedAIResponseError,
    ParsingError,
)
from resumehub.schemas.parsed_resume import ParsedResumeData
from resumehub.services.confidence import calculate_confidence
from resumehub.services.sanitizer import sanitize_parsed_data

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an expert resume parser. Extract structured data from resume text "
    "and return it as a valid JSON object."
)

RESPONSE_SCHEMA = """{
  "fullName": "Full name of the person",
  "email": "Email address",
  "phone": "Phone number",
  "address": "Full address",
  "skills": ["skill1", "skill2", "skill3"],
  "linkedinLink": "LinkedIn profile URL",
  "githubLink": "GitHub profile URL",
  "experience": [
    {
      "company": "Company name",
      "position": "Job title/position",
      "startDate": "Start date",
      "endDate": "End date (or 'Present' if current)",
      "description": "Job description/responsibilities",
      "isCurrent": false
    }
  ],
  "education": [
    {
      "institution": "School/University name",
      "degree": "Degree type (Bachelor's, Master's, etc.)",
      "fieldOfStudy": "Field of study/major",
      "startDate": "Start date",
      "endDate": "End date",
      "gpa": "GPA if mentioned",
      "description": "Additional details"
    }
  ],
  "projects": [
    {
      "name": "Project name",
      "description": "Project description",
      "technologies": ["tech1", "tech2"],
      "startDate": "Start date",
      "endDate": "End date",
      "link": "Project link if available"
    }
  ],
  "summary": "Professional summary/objective",
  "languages": ["Language1", "Language2"],
  "certifications": ["Certification1", "Certification2"]
}"""

PARSE_PROMPT = (
    "Please extract and structure the following resume information into a JSON format. "
    "Return ONLY a valid JSON object with the following structure:\n\n"
    "{schema}\n\n"
    "Resume text to analyze:\n{text}\n\n"
    "Important instructions:\n"
    "- If any field is not found in the resume, use null or empty array []\n"
    '- For dates, use the format as mentioned in the resume or "Present" for current positions\n'
    "- Extract all skills, technologies, and programming languages mentioned\n"
    "- For experience and education, extract all entries found\n"
    "- Be thorough in extracting information but don't make up information "
    "that's not present\n"
    "- Return ONLY the JSON object, no additional text or explanations"
)

_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


class ParseResult(BaseModel):
    success: bool
    data: ParsedResumeData
    confidence: int
    raw_response: str


def build_prompt(text: str) -> str:
    return PARSE_PROMPT.format(schema=RESPONSE_SCHEMA, text=text)


def strip_code_fences(content: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker, if any."""
    stripped = _LEADING_FENCE.sub("", content, count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def decode_ai_response(content: str) -> ParseResult:
    """Decode the model's text, sanitize it and score it.

    Raises ``MalformedAIResponseError`` (keeping ``content``) when the text
    is not a JSON object.
    """
    try:
        decoded: Any = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        logger.error("Could not decode AI response as JSON: %s. Raw response: %r", e, content)
        raise MalformedAIResponseError(
            "Failed to parse structured data from AI response", raw_response=content
        ) from e

    if not isinstance(decoded, dict):
        logger.error("AI response is JSON but not an object. Raw response: %r", content)
        raise MalformedAIResponseError(
            "AI response is not a JSON object", raw_response=content
        )

    data = sanitize_parsed_data(decoded)
    return ParseResult(
        success=True,
        data=data,
        confidence=calculate_confidence(data),
        raw_response=content,
    )


class ResumeParser(ABC):
    """Turns resume text into structured data through an external model."""

    provider: str = "unknown"

    @abstractmethod
    async def parse(self, text: str) -> ParseResult:
        """Parse resume text. Raises ``ParsingError`` on any provider failure."""
        ...


class GeminiResumeParser(ResumeParser):
    provider = "gemini"

    def __init__(
        self,
        client: genai.Client,
        model: str,
        *,
        timeout_seconds: float = 30.0,
        temperature: float = 0.1,
        max_output_tokens: int = 4000,
    ) -> None:
        self.client = client
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def parse(self, text: str) -> ParseResult:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await self.client.aio.models.generate_content(
                    model=self.model,
                    contents=build_prompt(text),
                    config=types.GenerateContentConfig(
                        system_instruction=SYSTEM_INSTRUCTION,
                        response_mime_type="application/json",
                        temperature=self.temperature,
                        max_output_tokens=self.max_output_tokens,
                    ),
                )
        except TimeoutError as e:
            raise ParsingError(
                f"AI request timed out after {self.timeout_seconds:g} seconds"
            ) from e
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error("Gemini API error: %s", e)
            raise ParsingError(f"Failed to extract resume data: {e}") from e

        raw = (response.text or "").strip()
        if not raw:
            raise MalformedAIResponseError("AI response was empty", raw_response="")
        return decode_ai_response(raw)


class DeepSeekResumeParser(ResumeParser):
    """Client for DeepSeek's OpenAI-compatible chat completions endpoint."""

    provider = "deepseek"

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str,
        model: str = "deepseek-chat",
        timeout_seconds: float = 30.0,
        temperature: float = 0.1,
        max_output_tokens: int = 4000,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise AIConfigurationError("DeepSeek API key is not configured")
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._http_client = http_client

    def _payload(self, text: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": build_prompt(text)},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
        }

    async def _post(self, client: httpx.AsyncClient, text: str) -> httpx.Response:
        return await client.post(
            self.api_url,
            json=self._payload(text),
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout_seconds,
        )

    async def _request(self, text: str) -> httpx.Response:
        if self._http_client is not None:
            return await self._post(self._http_client, text)
        async with httpx.AsyncClient() as client:
            return await self._post(client, text)

    async def parse(self, text: str) -> ParseResult:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                response = await self._request(text)
            response.raise_for_status()
        except (TimeoutError, httpx.TimeoutException) as e:
            raise ParsingError(
                f"AI request timed out after {self.timeout_seconds:g} seconds"
            ) from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "DeepSeek API error %s: %s", e.response.status_code, e.response.text[:500]
            )
            raise ParsingError(f"Failed to extract resume data: {e}") from e
        except httpx.HTTPError as e:
            logger.error("DeepSeek transport error: %s", e)
            raise ParsingError(f"Failed to extract resume data: {e}") from e

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ParsingError("Invalid response from DeepSeek API") from e
        if not isinstance(content, str):
            raise ParsingError("Invalid response from DeepSeek API")

        return decode_ai_response(content.strip())


class RetryingResumeParser(ResumeParser):
    """Retries transient provider failures with exponential backoff.

    Malformed responses and configuration errors are raised immediately.
    """

    def __init__(self, inner: ResumeParser, max_retries: int, backoff_seconds: float) -> None:
        self.inner = inner
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds

    @property
    def provider(self) -> str:  # type: ignore[override]
        return self.inner.provider

    async def parse(self, text: str) -> ParseResult:
        attempt = 0
        while True:
            try:
                return await self.inner.parse(text)
            except (MalformedAIResponseError, AIConfigurationError):
                raise
            except ParsingError as e:
                if attempt >= self.max_retries:
                    raise
                delay = self.backoff_seconds * (2**attempt)
                attempt += 1
                logger.warning(
                    "AI parsing attempt %d/%d failed (%s), retrying in %.1fs",
                    attempt,
                    self.max_retries + 1,
                    e,
                    delay,
                )
                await asyncio.sleep(delay)
