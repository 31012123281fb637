#!/usr/bin/env python
"""Fire concurrent absence bookings for one user against a real database.

Creates a throwaway user, submits the same date range N times in parallel
and reports how many bookings succeeded. Exactly one should.
"""

import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path
from uuid import uuid4

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from peoplehub.database import SqlAlchemyTransactionManager, dispose_engine
from peoplehub.exceptions import AbsenceDateConflictError, ConcurrentBookingError
from peoplehub.logging_config import setup_logging
from peoplehub.models.domain import Actor, User
from peoplehub.services.absence_service import AbsenceService
from peoplehub.services.notification_service import WebhookNotifier, get_notifier


async def check_absence_race(concurrency: int, days_ahead: int) -> bool:
    """Run the race and print the outcome counts."""
    transactions = SqlAlchemyTransactionManager.from_settings()
    service = AbsenceService(transactions, notifier=get_notifier())

    organization_id = uuid4()
    user = User.create(organization_id, f"race-{uuid4().hex[:8]}@example.com", "Race Check")

    async def insert_user(uow):
        await uow.users.insert(user)

    await transactions.run(insert_user)
    actor = Actor(id=user.id, role=user.role, email=user.email.value, organization_id=organization_id)

    start = date.today() + timedelta(days=days_ahead)
    end = start + timedelta(days=4)

    results = await asyncio.gather(
        *(
            service.create_absence(actor, start, end, "Concurrent booking check")
            for _ in range(concurrency)
        ),
        return_exceptions=True,
    )

    created = [r for r in results if not isinstance(r, BaseException)]
    conflicts = [r for r in results if isinstance(r, AbsenceDateConflictError)]
    exhausted = [r for r in results if isinstance(r, ConcurrentBookingError)]
    unexpected = [r for r in results if isinstance(r, BaseException) and r not in conflicts + exhausted]

    print(f"created={len(created)} conflicts={len(conflicts)} retries_exhausted={len(exhausted)}")
    for error in unexpected:
        print(f"unexpected: {type(error).__name__}: {error}")

    await dispose_engine()
    await WebhookNotifier.close_client()
    return len(created) == 1 and not unexpected


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Check concurrent absence booking")
    parser.add_argument("--concurrency", type=int, default=5, help="Parallel bookings")
    parser.add_argument("--days-ahead", type=int, default=30, help="Start date offset from today")
    args = parser.parse_args()

    setup_logging("INFO", "check-absence-race")
    ok = asyncio.run(check_absence_race(args.concurrency, args.days_ahead))
    sys.exit(0 if ok else 1)
