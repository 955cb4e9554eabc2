"""Create a user in the configured DB.

Usage:
  python scripts/create_user.py --username alice --email alice@example.com --password '...' --role user

NOTE: This is intended for local/dev.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from workforce_api.auth.crud import create_user, get_user_by_id, public_user
from workforce_api.auth.security import hash_password
from workforce_api.config import load_config
from workforce_api.db import Database, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--username", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--role", default="user")
    args = ap.parse_args()

    cfg = load_config()
    password_hash = hash_password(args.password)
    db = Database.from_config(cfg)
    try:
        init_db(db)
        with db.connect() as conn:
            user_id = create_user(
                conn,
                username=args.username,
                email=args.email,
                password_hash=password_hash,
                role=args.role,
            )
            u = public_user(get_user_by_id(conn, user_id))
    finally:
        db.close()

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
