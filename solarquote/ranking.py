"""
Ranking Engine — best-value comparison of vendor quotations for one request.

Overall Score = Price Score × 0.7 + Warranty Score × 0.3

  Price Score    = 100 − (price / max price × 100)       (cheaper is better)
  Warranty Score = warranty years / max warranty years × 100

Each sub-score is 0-100 relative to the other quotations in the same set,
so a lone quotation scores 0 on price and 100 on warranty (if it states any
years). Pure functions only: no DB access, no side effects.

Tie-break (recommendation and longest warranty): lowest price, then earliest
created_at, then input order.
"""
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

PRICE_WEIGHT = 0.7
WARRANTY_WEIGHT = 0.3

_DIGITS = re.compile(r"\d+")


# --- Helpers ---

def parse_warranty_years(text: str | None) -> int:
    """'10 years' → 10, '5-year' → 5, 'lifetime' → 0"""
    if not text:
        return 0
    m = _DIGITS.search(str(text))
    return int(m.group()) if m else 0


def _field(q: Any, *names: str):
    for name in names:
        if isinstance(q, Mapping):
            if name in q:
                return q[name]
        elif hasattr(q, name):
            return getattr(q, name)
    return None


def _timestamp(value) -> float | None:
    if isinstance(value, datetime):
        return value.timestamp()
    return None


# --- Result types ---

@dataclass
class ScoredQuotation:
    quotation: Any
    position: int
    price: float
    warranty_years: int
    created_ts: float | None = None
    price_score: float = 0
    warranty_score: float = 0
    overall_score: float = 0

    @property
    def id(self):
        return _field(self.quotation, "id")

    def tiebreak_key(self) -> tuple:
        """Lower sorts first: cheapest, then earliest, then input order."""
        ts = self.created_ts
        return (self.price, ts is None, ts or 0.0, self.position)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "price": round(self.price, 2),
            "warranty_years": self.warranty_years,
            "price_score": round(self.price_score, 2),
            "warranty_score": round(self.warranty_score, 2),
            "overall_score": round(self.overall_score, 2),
        }


@dataclass
class Ranking:
    scored: list[ScoredQuotation] = field(default_factory=list)  # input order
    by_price: list[ScoredQuotation] = field(default_factory=list)
    recommended: ScoredQuotation | None = None
    lowest_price: ScoredQuotation | None = None
    longest_warranty: ScoredQuotation | None = None
    average_price: float = 0

    def to_dict(self) -> dict:
        return {
            "by_price": [s.to_dict() for s in self.by_price],
            "recommended": self.recommended.to_dict() if self.recommended else None,
            "lowest_price": self.lowest_price.to_dict() if self.lowest_price else None,
            "longest_warranty": self.longest_warranty.to_dict() if self.longest_warranty else None,
            "average_price": round(self.average_price, 2),
        }


# --- Engine ---

def score_quotations(quotations: list) -> list[ScoredQuotation]:
    """Attach price/warranty/overall scores. Returns items in input order."""
    if not quotations:
        raise ValueError("Cannot score an empty list of quotations")

    scored = [
        ScoredQuotation(
            quotation=q,
            position=i,
            price=float(_field(q, "price") or 0),
            warranty_years=parse_warranty_years(_field(q, "warranty_period", "warranty")),
            created_ts=_timestamp(_field(q, "created_at")),
        )
        for i, q in enumerate(quotations)
    ]

    max_price = max(s.price for s in scored) or 1
    max_warranty = max(s.warranty_years for s in scored) or 1

    for s in scored:
        s.price_score = 100 - (s.price / max_price * 100)
        s.warranty_score = s.warranty_years / max_warranty * 100
        s.overall_score = s.price_score * PRICE_WEIGHT + s.warranty_score * WARRANTY_WEIGHT
    return scored


def rank_quotations(quotations: list) -> Ranking:
    """Score, sort and summarize quotations for one request.

    Raises ValueError on an empty list; callers gate the comparison view
    on having at least two quotations.
    """
    scored = score_quotations(quotations)

    by_price = sorted(scored, key=lambda s: s.price)  # stable
    recommended = min(scored, key=lambda s: (-s.overall_score, *s.tiebreak_key()))
    lowest_price = min(scored, key=lambda s: s.tiebreak_key())
    longest_warranty = min(scored, key=lambda s: (-s.warranty_years, *s.tiebreak_key()))

    return Ranking(
        scored=scored,
        by_price=by_price,
        recommended=recommended,
        lowest_price=lowest_price,
        longest_warranty=longest_warranty,
        average_price=sum(s.price for s in scored) / len(scored),
    )
