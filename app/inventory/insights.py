"""AI inventory insights.

The core only assembles the numeric snapshot and the prompt; text generation
is an injected ``InsightGenerator`` so everything else is testable offline.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import httpx
from sqlalchemy.orm import Session

from app.db.models import utcnow
from app.inventory.analytics import InventorySnapshot, inventory_snapshot
from app.inventory.classifier import DEAD_STOCK_DAYS
from app.inventory.errors import UpstreamUnavailable, ValidationError
from app.inventory.store import all_products

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

INSIGHT_PROMPT = """You are an inventory management expert for an AEC materials business in India. \
Analyze this data and provide a clear, well-formatted analysis:

INVENTORY OVERVIEW:
- Total Products: {total_products}
- Out of Stock: {out_of_stock_count} (URGENT)
- Low Stock: {low_stock_count} (needs reorder)
- Dead Stock: {dead_stock_count} (no sales {dead_stock_days}+ days)
- Total Value: Rs. {total_value:,.2f}
- Dead Stock Value: Rs. {dead_stock_value:,.2f}

Please provide a structured analysis with these sections:

HEALTH SCORE: Rate from 1-10 with a brief explanation

TOP 3 IMMEDIATE ACTIONS:
1. [First action with specific details]
2. [Second action with expected benefit]
3. [Third action with rationale]

OPTIMIZATION STRATEGY:
[One key strategy to improve inventory management]

CRITICAL WARNINGS:
[Any urgent issues that need immediate attention, or "None" if all is well]

Keep your response clear, direct, and actionable. Use simple formatting."""


class InsightGenerator(Protocol):
    def generate_insight_text(self, prompt: str) -> str: ...


@dataclass
class InsightReport:
    insights: str
    snapshot: InventorySnapshot


@dataclass
class InsightServiceStatus:
    available: bool
    detail: str


class GeminiInsightClient:
    """InsightGenerator backed by the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "GeminiInsightClient":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            temperature=settings.GEMINI_TEMPERATURE,
            max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
            timeout=settings.GEMINI_TIMEOUT_SECONDS,
        )

    def generate_insight_text(self, prompt: str) -> str:
        if not self._api_key:
            raise UpstreamUnavailable("Gemini API key not configured")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }
        url = f"{GEMINI_BASE_URL}/{self.model}:generateContent"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, params={"key": self._api_key}, json=body)
        except httpx.HTTPError as e:
            logger.warning("Gemini request failed: %s", e.__class__.__name__)
            raise UpstreamUnavailable(f"Gemini API unreachable: {e.__class__.__name__}") from e

        if response.status_code != 200:
            logger.warning("Gemini returned HTTP %s", response.status_code)
            raise UpstreamUnavailable(f"Gemini API error: {response.status_code}", upstream_status=response.status_code)

        try:
            return response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamUnavailable("Gemini API returned an unexpected response") from e


def build_insight_prompt(snapshot: InventorySnapshot, dead_stock_days: int = DEAD_STOCK_DAYS) -> str:
    return INSIGHT_PROMPT.format(
        total_products=snapshot.total_products,
        out_of_stock_count=snapshot.out_of_stock_count,
        low_stock_count=snapshot.low_stock_count,
        dead_stock_count=snapshot.dead_stock_count,
        dead_stock_days=dead_stock_days,
        total_value=snapshot.total_value,
        dead_stock_value=snapshot.dead_stock_value,
    )


def generate_insights(
    db: Session,
    generator: InsightGenerator,
    now: datetime | None = None,
    dead_stock_days: int = DEAD_STOCK_DAYS,
) -> InsightReport:
    products = all_products(db)
    if not products:
        raise ValidationError("No products to analyze")

    snapshot = inventory_snapshot(products, now or utcnow(), dead_stock_days)
    text = generator.generate_insight_text(build_insight_prompt(snapshot, dead_stock_days))
    logger.info("Generated insights for %d products", snapshot.total_products)
    return InsightReport(insights=text, snapshot=snapshot)


def check_insight_service(generator: InsightGenerator) -> InsightServiceStatus:
    try:
        reply = generator.generate_insight_text("Say 'Hello! API is working!'")
    except UpstreamUnavailable as e:
        return InsightServiceStatus(available=False, detail=e.message)
    return InsightServiceStatus(available=True, detail=reply)
