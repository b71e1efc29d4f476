from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from hr_records.database.bootstrap import apply_schema, ensure_super_admin, list_tables


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )

    password = getattr(settings, "SUPER_ADMIN_PASSWORD", "")
    if not password:
        print("SKIP: SUPER_ADMIN_PASSWORD not set, no super admin seeded")
        return
    created = ensure_super_admin(
        db_config,
        employee_id=settings.SUPER_ADMIN_EMPLOYEE_ID,
        email=settings.SUPER_ADMIN_EMAIL,
        password=password,
    )
    print("OK: Super admin " + ("created" if created else "already present") + f" ({settings.SUPER_ADMIN_EMAIL})")


if __name__ == "__main__":
    main()
