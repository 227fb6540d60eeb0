"""
Recompute stored word counts for existing posts.

Submission validation reads the stored count, so run this after changing
how words are counted.

Usage:
    python backend/scripts/backfill_word_counts.py --batch-size 200
"""

import argparse
import asyncio

from sqlalchemy import select

from app.core.database import async_session
from app.models import ContentItem
from app.utils.text_processing import count_words


async def run(batch_size: int = 200, dry_run: bool = False) -> None:
    last_id = 0
    scanned = 0
    changed = 0
    while True:
        async with async_session() as db:
            result = await db.execute(
                select(ContentItem)
                .where(ContentItem.id > last_id)
                .order_by(ContentItem.id.asc())
                .limit(batch_size)
            )
            rows = result.scalars().unique().all()
            if not rows:
                break
            for item in rows:
                scanned += 1
                fresh = count_words(item.body or "")
                if fresh != item.word_count:
                    item.word_count = fresh
                    changed += 1
            if dry_run:
                await db.rollback()
            else:
                await db.commit()
            last_id = rows[-1].id
            print(f"Scanned batch up to id={last_id} size={len(rows)} changed={changed}")
    print(f"Done. Scanned {scanned} posts, {changed} word counts {'would change' if dry_run else 'updated'}.")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--batch-size", type=int, default=200)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()
    asyncio.run(run(batch_size=max(1, args.batch_size), dry_run=args.dry_run))


if __name__ == "__main__":
    main()
