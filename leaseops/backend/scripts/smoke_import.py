# scripts/smoke_import.py
"""
Run one listing import from the command line and print what came back.

  python scripts/smoke_import.py "https://www.zillow.com/homedetails/123-Main-St-Cleveland-OH-44101/98765_zpid/"
"""
import argparse
import asyncio
import json
import logging

from app.config import settings
from app.domain.errors import ListingImportError
from app.service_layer.use_cases.import_listing import ListingImportPipeline


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import a single listing URL (read only, nothing is saved).")
    p.add_argument("url", help="listing URL")
    p.add_argument("--org", default="smoke-org", help="organization id used in logs")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    return p.parse_args()


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    try:
        result = await ListingImportPipeline().run(args.url, args.org)
    except ListingImportError as e:
        print(json.dumps({"error": e.category, "message": str(e)}, indent=2))
        return 1

    out = {
        "listing_id": result.listing_id,
        "tier": result.tier.value,
        "strategies": list(result.strategies),
        "limited_data": result.limited_data,
        "provider_meta": result.provider_meta,
        **result.as_property_fields(),
    }
    print(json.dumps(out, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
