"""AI Agents package."""

from loan_ledger.agents.portfolio_agent import (
    EMPTY_RESPONSE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    SERVICE_ERROR_MESSAGE,
    ExternalServiceError,
    PortfolioAnalysisAgent,
)

__all__ = [
    "EMPTY_RESPONSE_MESSAGE",
    "NOT_CONFIGURED_MESSAGE",
    "SERVICE_ERROR_MESSAGE",
    "ExternalServiceError",
    "PortfolioAnalysisAgent",
]
