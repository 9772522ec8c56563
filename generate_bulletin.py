#!/usr/bin/env python3
"""
Simple wrapper to generate one report card for a given student
Usage: python3 generate_bulletin.py <student_id> <period> <academic_year> [actor_id]
"""

import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

if len(sys.argv) < 4:
    print("ERROR: Missing arguments")
    print("Usage: python3 generate_bulletin.py <student_id> <period> <academic_year> [actor_id]")
    sys.exit(1)

student_id = int(sys.argv[1])
period = sys.argv[2]
academic_year = sys.argv[3]
actor_id = int(sys.argv[4]) if len(sys.argv) > 4 else None

# Import after adding to path
from bulletin_builder.api.database.session import get_session_factory, init_models
from bulletin_builder.api.dependencies import build_services
from bulletin_builder.config import configure_logging
from bulletin_builder.exceptions import BulletinError


async def main() -> int:
    await init_models()
    async with get_session_factory()() as session:
        services = build_services(session)
        try:
            card = await services.generator.generate(student_id, period, academic_year, actor_ref=actor_id)
        except BulletinError as e:
            print(f"❌ {e.message}")
            return 1

    print(f"\n✅ SUCCESS!")
    print(f"Report card {card.id}: {card.period_label} {card.academic_year}")
    print(f"  Average: {card.average_display} ({card.mention.value})")
    print(f"  Rank: {card.rank_display}")
    return 0


configure_logging()
sys.exit(asyncio.run(main()))
