# scripts/init_leaderboard.py
import sys
from pathlib import Path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from companygrow.db import SessionLocal
from companygrow.domain.leaderboard.service import recompute_all


def main():
    db = SessionLocal()
    try:
        n = recompute_all(db)
        print(f"Leaderboard initialized for {n} users")
    finally:
        db.close()


if __name__ == "__main__":
    main()
