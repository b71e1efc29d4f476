from hr_records.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use
from hr_records.main import SCHEMA_PATH


def test_splitter_respects_quotes_and_comments():
    sql = "-- header; not a statement\nINSERT INTO t VALUES ('a;b');\nSELECT 1"
    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_schema_file_creates_every_table():
    sql = _strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))

    assert all(s.upper().startswith("CREATE TABLE") for s in statements)
    created = {s.split()[5].strip("`") for s in statements}
    assert {
        "employees",
        "employee_documents",
        "notifications",
        "profile_update_requests",
        "attendance_records",
        "attendance_reminders",
        "audit_log",
    } <= created
