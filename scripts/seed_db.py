from __future__ import annotations

import argparse
import importlib

from workforce_admin.config import get_settings_module
from workforce_admin.database.bootstrap import (
    DEMO_ADMIN_EMAIL,
    DEMO_ADMIN_PASSWORD,
    ensure_demo_admin,
    seed_role_permissions,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the admin profile and default role permissions.")
    parser.add_argument("--email", default=DEMO_ADMIN_EMAIL)
    parser.add_argument("--password", default=DEMO_ADMIN_PASSWORD)
    parser.add_argument("--reset-permissions", action="store_true", help="replace stored role permissions")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_admin(db_config, email=args.email, password=args.password)
    rows = seed_role_permissions(db_config, overwrite=args.reset_permissions)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(admin={args.email}, permission rows={rows})"
    )


if __name__ == "__main__":
    main()
