"""
AI Portfolio Analysis for Loan Ledger

The agent turns a pre-computed summary of the active loans into a short,
free-form analysis for the lender.

CRITICAL BOUNDARIES:
- CAN: Read a summary of active loans (name, principal, kind, status, term, repaid)
- CANNOT: See or change the ledger itself
- CANNOT: Crash the caller. Every failure becomes a fixed fallback message

The call is made once per request. There is no retry and no cancellation,
and two overlapping requests are not merged.
"""

import asyncio
import json
from typing import Any, Iterable, Optional
from uuid import UUID

import google.generativeai as genai

from loan_ledger.audit import AuditLogger, create_correlation_id
from loan_ledger.config import GeminiSettings, get_settings
from loan_ledger.ledger.portfolio import summarize_for_analysis
from loan_ledger.models.audit import AuditEventBuilder
from loan_ledger.models.loan import Loan, PortfolioSummaryEntry


NOT_CONFIGURED_MESSAGE = "Please configure a Gemini API key to use the AI analysis."
EMPTY_RESPONSE_MESSAGE = "Unable to analyze the portfolio right now."
SERVICE_ERROR_MESSAGE = "An error occurred while connecting to the AI service."


class ExternalServiceError(Exception):
    """The text-generation service failed or timed out."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(message)


class PortfolioAnalysisAgent:
    """
    AI agent for the portfolio analysis.

    RESPONSIBILITIES:
    - Build the prompt from the active-loan summary
    - Call Gemini once, with a timeout
    - Map every outcome to a string the UI can show as-is

    Without an API key the agent is still usable and simply
    answers with NOT_CONFIGURED_MESSAGE.
    """

    SERVICE_NAME = "gemini"

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        model: Optional[Any] = None,
    ):
        """
        Initialize the agent.

        Args:
            settings: Gemini settings. Loaded from the environment if None.
            audit_logger: Where to record analyses and failures.
            model: Object with an async generate_content_async(prompt).
                   Built from settings if None.
        """
        self._settings = settings or get_settings().gemini
        self._audit_logger = audit_logger
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    def build_prompt(self, entries: list[PortfolioSummaryEntry]) -> str:
        data = json.dumps(
            [entry.model_dump(mode="json") for entry in entries],
            ensure_ascii=False,
        )
        language = self._settings.response_language

        return f"""You are a smart financial assistant for a personal money-lending ledger.
Analyze the following loan portfolio and give the lender short, concise advice.

Raw data (active loans only):
{data}

What is needed:
1. Risk overview (which borrowers or borrower groups are worrying)
2. Advice on managing cash flow
3. A short word of encouragement

Answer in {language}, formatted as Markdown."""

    async def analyze_portfolio(
        self,
        loans: Iterable[Loan],
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Produce a free-form analysis of the active loans.

        Never raises. Returns NOT_CONFIGURED_MESSAGE without a model,
        SERVICE_ERROR_MESSAGE on failure and EMPTY_RESPONSE_MESSAGE
        when the model answers with nothing.
        """
        if not self.is_configured:
            return NOT_CONFIGURED_MESSAGE

        correlation_id = correlation_id or create_correlation_id()
        entries = summarize_for_analysis(loans)
        prompt = self.build_prompt(entries)

        try:
            text = await self._generate(prompt)
        except ExternalServiceError as e:
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service=e.service,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return SERVICE_ERROR_MESSAGE

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.portfolio_analyzed(
                loan_count=len(entries),
                correlation_id=correlation_id,
            ))

        return text or EMPTY_RESPONSE_MESSAGE

    async def _generate(self, prompt: str) -> str:
        """
        Call the model once.

        Raises:
            ExternalServiceError: On timeout or any failure of the call
        """
        try:
            response = await asyncio.wait_for(
                self._model.generate_content_async(prompt),
                timeout=self._settings.request_timeout_seconds,
            )
            # .text raises ValueError when the reply was blocked or empty
            return (response.text or "").strip()
        except asyncio.TimeoutError as e:
            raise ExternalServiceError(
                self.SERVICE_NAME,
                f"No answer within {self._settings.request_timeout_seconds}s",
            ) from e
        except Exception as e:
            raise ExternalServiceError(self.SERVICE_NAME, str(e) or type(e).__name__) from e
