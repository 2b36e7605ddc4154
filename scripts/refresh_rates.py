"""
Manual rate refresh — runs one acquisition cycle from the command line.

Usage:
    python scripts/refresh_rates.py [AMOUNT] [CURRENCY]

Walks the provider fallback chain once, prints which source answered (or
why each failed), then prints a sample quote against the fetched rates.
"""

import asyncio
import json
import sys

from ripefx.fx_engine.formatting import format_currency, format_stablecoin
from ripefx.fx_engine.orchestrator import AllSourcesFailed
from ripefx.services.rate_service import build_rate_service


async def main(amount: str = "100", currency: str = "PHP"):
    """Refresh rates once and print the outcome and a sample quote."""
    print("Starting manual rate refresh...")
    service = build_rate_service()
    outcome = await service.refresh()

    if isinstance(outcome, AllSourcesFailed):
        print("\n=== All sources failed, using default rates ===")
        for failure in outcome.failures:
            print(f"  {failure.source_id}: {failure.error.value} ({failure.detail})")
    else:
        print(f"\n=== Rates from {outcome.source_id} ===")
        rates = {
            code: {"interbank": str(r.interbank), "customer": str(r.customer)}
            for code, r in outcome.rates_by_currency.items()
        }
        print(json.dumps(rates, indent=2))

    quote = service.build_quote(amount, currency)
    if quote is None:
        print(f"\nNo quote for amount {amount!r}")
        return

    print(f"\n=== Quote: {format_stablecoin(quote.amount)} USDC -> {quote.currency} ===")
    print(f"Recipient gets: {format_currency(quote.primary.net_fiat_received, quote.currency)}")
    print(f"Total fees:     {format_currency(quote.primary.total_fees_fiat, quote.currency)}")
    if quote.legacy is not None:
        print(f"Legacy payout:  {format_currency(quote.legacy.net_fiat_received, quote.currency)}")
        print(f"Savings:        {format_currency(quote.savings.amount, quote.currency)}")


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:3]))
