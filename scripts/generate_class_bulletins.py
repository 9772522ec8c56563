#!/usr/bin/env python3
"""
BATCH BULLETIN GENERATOR
Generates the report cards of a whole class for one period and prints a summary.

Usage: python3 scripts/generate_class_bulletins.py <class_id> <period> <academic_year>
Example: python3 scripts/generate_class_bulletins.py 3 trimestre_1 2025-2026

Exit code 1 when at least one student could not receive a report card.
"""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bulletin_builder.api.database.session import get_session_factory, init_models
from bulletin_builder.api.dependencies import build_services
from bulletin_builder.config import configure_logging, get_settings
from bulletin_builder.core.models import BatchGenerationResult
from bulletin_builder.exceptions import BulletinError


def print_summary(result: BatchGenerationResult):
    """Print generation summary."""
    print("\n" + "=" * 70)
    print("BATCH GENERATION SUMMARY")
    print("=" * 70)

    print(f"\nClass {result.class_ref} - {result.period.label} {result.academic_year}")
    print(f"\n✅ Created: {result.created_count}")
    print(f"❌ Failed: {result.failed_count}")

    if result.created_report_cards:
        print("\nRanking:")
        for card in sorted(result.created_report_cards, key=lambda c: c.rank):
            print(f"  #{card.rank:3d} | Student {card.student_ref:6d} | {card.average_display} | {card.mention.value}")

    if result.error_messages:
        print("\n❌ FAILURES:")
        print("-" * 50)
        for message in result.error_messages:
            print(f"  {message}")

    print("=" * 70)


async def run(class_id: int, period: str, academic_year: str) -> int:
    settings = get_settings()
    await init_models()

    async with get_session_factory(settings)() as session:
        services = build_services(session, settings)
        try:
            result = await services.batch.generate_for_class(class_id, period, academic_year)
        except BulletinError as e:
            print(f"❌ {e.message}")
            return 1

    print_summary(result)
    return 1 if result.failed_count else 0


def main():
    if len(sys.argv) < 4:
        print("ERROR: Missing arguments")
        print("Usage: python3 scripts/generate_class_bulletins.py <class_id> <period> <academic_year>")
        return 1

    configure_logging()
    return asyncio.run(run(int(sys.argv[1]), sys.argv[2], sys.argv[3]))


if __name__ == "__main__":
    sys.exit(main())
