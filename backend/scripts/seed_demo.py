import sys

from repo_events import EventRepo
from seed import seed_events
from service_events import EventService
from settings import settings


def main(days: int):
    print(f"Seeding {days} nights of demo data for {settings.default_user}...")
    inserted = seed_events(EventService(EventRepo()), settings.default_user, days)
    print(f"Seed complete. Total events inserted: {inserted}")


if __name__ == "__main__":
    if len(sys.argv) > 2:
        print("Usage: python scripts/seed_demo.py [days]")
        sys.exit(1)

    main(int(sys.argv[1]) if len(sys.argv) == 2 else settings.seed_days)
