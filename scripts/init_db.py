import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from workforce_api.auth.crud import bootstrap_admin_if_needed
from workforce_api.config import load_config
from workforce_api.db import Database, init_db


def main() -> None:
    cfg = load_config()
    db = Database.from_config(cfg)
    try:
        init_db(db)
        boot = bootstrap_admin_if_needed(db, cfg)
    finally:
        db.close()

    print(f"DB initialized: {cfg.DB_DSN}")
    if boot:
        print(f"Bootstrapped admin: {boot['email']}")


if __name__ == "__main__":
    main()
