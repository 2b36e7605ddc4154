"""
Pydantic schemas for conversion quotes.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ConversionData(BaseModel):
    """Ripe conversion with full fee breakdown."""
    gross_fiat: Decimal
    transaction_fee: Decimal
    transaction_fee_fiat: Decimal
    network_fee_fiat: Decimal
    fx_spread_amount: Decimal
    fx_spread_percent: Decimal
    net_fiat_received: Decimal
    effective_rate: Decimal
    total_fees_fiat: Decimal
    total_fees_percent: Decimal
    customer_rate: Decimal
    interbank_rate: Decimal
    required_amount: Decimal | None = None
    target_fiat: Decimal | None = None


class LegacyData(BaseModel):
    """Same transfer through a legacy provider, for comparison only."""
    net_fiat_received: Decimal
    total_fees_fiat: Decimal
    effective_rate: Decimal
    legacy_rate: Decimal
    transaction_fee_fiat: Decimal
    network_fee_fiat: Decimal


class SavingsData(BaseModel):
    amount: Decimal
    percent: Decimal
    primary_better: bool


class QuoteResponse(BaseModel):
    """Full quote: conversion, legacy comparison, savings and rate freshness."""
    direction: str
    currency: str
    stablecoin: str
    amount: Decimal
    stablecoin_amount: Decimal
    stablecoin_rate: Decimal
    conversion: ConversionData
    legacy: LegacyData | None
    savings: SavingsData | None
    switch_amount: Decimal | None
    net_display: str
    total_fees_display: str
    source: str
    is_stale: bool
    last_updated: datetime | None
