from __future__ import annotations

import sqlite3


DEFAULT_SYSTEM_SETTINGS = {
    "introduction_expiry_days": "7",
    "max_pending_introductions_per_professional": "10",
}


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create normalized schema, indexes, views and default settings (idempotent)."""
    cur = conn.cursor()

    # Companies table
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS companies (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  company_name TEXT NOT NULL,\n"
            "  company_website TEXT,\n"
            "  industry TEXT,\n"
            "  verification_status TEXT NOT NULL DEFAULT 'PENDING'\n"
            "    CHECK (verification_status IN ('PENDING', 'VERIFIED', 'UNVERIFIED', 'PREMIUM')),\n"
            "  verification_date TEXT,\n"
            "  verification_notes TEXT,\n"
            "  verified_by TEXT,\n"
            "  introduction_credits INTEGER NOT NULL DEFAULT 0 CHECK (introduction_credits >= 0),\n"
            "  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_companies_verification ON companies(verification_status);")

    # HR partners (company members; one ADMIN is authoritative for domain checks)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS hr_partners (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  company_id INTEGER NOT NULL,\n"
            "  full_name TEXT,\n"
            "  email TEXT NOT NULL,\n"
            "  role_in_platform TEXT NOT NULL DEFAULT 'MEMBER' CHECK (role_in_platform IN ('ADMIN', 'MEMBER')),\n"
            "  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_hr_partners_company ON hr_partners(company_id, role_in_platform);")

    # Professionals (soft-deleted via deleted_at, never removed)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS professionals (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  first_name TEXT,\n"
            "  last_name TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  verification_status TEXT NOT NULL DEFAULT 'UNVERIFIED'\n"
            "    CHECK (verification_status IN ('UNVERIFIED', 'BASIC', 'FULL', 'PREMIUM')),\n"
            "  verification_date TEXT,\n"
            "  verification_notes TEXT,\n"
            "  verified_by TEXT,\n"
            "  open_to_opportunities INTEGER NOT NULL DEFAULT 1,\n"
            "  hidden_from_company_ids_json TEXT NOT NULL DEFAULT '[]',\n"
            "  deleted_at TEXT,\n"
            "  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_professionals_verification ON professionals(verification_status);")

    # Job roles referenced by introductions (search surface only)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS job_roles (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  company_id INTEGER NOT NULL,\n"
            "  role_title TEXT NOT NULL,\n"
            "  location_city TEXT,\n"
            "  status TEXT NOT NULL DEFAULT 'ACTIVE',\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id)\n"
            ")"
        )
    )

    # Introduction requests: append-only history, status only leaves PENDING once
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS introduction_requests (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  company_id INTEGER NOT NULL,\n"
            "  professional_id INTEGER NOT NULL,\n"
            "  sent_by_id INTEGER NOT NULL,\n"
            "  job_role_id INTEGER,\n"
            "  personalized_message TEXT NOT NULL,\n"
            "  match_score REAL,\n"
            "  status TEXT NOT NULL DEFAULT 'PENDING'\n"
            "    CHECK (status IN ('PENDING', 'ACCEPTED', 'DECLINED', 'EXPIRED')),\n"
            "  sent_at TEXT NOT NULL,\n"
            "  expires_at TEXT NOT NULL,\n"
            "  viewed_by_professional INTEGER NOT NULL DEFAULT 0,\n"
            "  viewed_at TEXT,\n"
            "  responded_at TEXT,\n"
            "  response_message TEXT,\n"
            "  CHECK (expires_at > sent_at),\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id),\n"
            "  FOREIGN KEY(professional_id) REFERENCES professionals(id),\n"
            "  FOREIGN KEY(sent_by_id) REFERENCES hr_partners(id),\n"
            "  FOREIGN KEY(job_role_id) REFERENCES job_roles(id)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_intro_professional_status ON introduction_requests(professional_id, status, expires_at);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_intro_company_status ON introduction_requests(company_id, status, expires_at);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_intro_status_expires ON introduction_requests(status, expires_at);")

    # Key/value system settings read at decision time
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS system_settings (\n"
            "  key TEXT PRIMARY KEY,\n"
            "  value TEXT NOT NULL,\n"
            "  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),\n"
            "  updated_by TEXT\n"
            ")"
        )
    )
    for key, value in DEFAULT_SYSTEM_SETTINGS.items():
        cur.execute(
            "INSERT OR IGNORE INTO system_settings (key, value, updated_by) VALUES (?, ?, 'bootstrap')",
            (key, value),
        )

    # Audit trail
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS activity_log (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  actor_id TEXT NOT NULL,\n"
            "  action_type TEXT NOT NULL,\n"
            "  entity_type TEXT NOT NULL,\n"
            "  entity_id INTEGER,\n"
            "  description TEXT,\n"
            "  metadata_json TEXT,\n"
            "  created_at TEXT NOT NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_activity_entity ON activity_log(entity_type, entity_id);")

    # View for joined reads
    cur.execute("DROP VIEW IF EXISTS v_introductions;")
    cur.execute(
        (
            "CREATE VIEW v_introductions AS\n"
            "SELECT\n"
            "  r.id,\n"
            "  r.company_id,\n"
            "  r.professional_id,\n"
            "  r.sent_by_id,\n"
            "  r.job_role_id,\n"
            "  r.personalized_message,\n"
            "  r.match_score,\n"
            "  r.status,\n"
            "  r.sent_at,\n"
            "  r.expires_at,\n"
            "  r.viewed_by_professional,\n"
            "  r.viewed_at,\n"
            "  r.responded_at,\n"
            "  r.response_message,\n"
            "  c.company_name,\n"
            "  c.industry,\n"
            "  j.role_title,\n"
            "  j.location_city\n"
            "FROM introduction_requests r\n"
            "JOIN companies c ON r.company_id = c.id\n"
            "LEFT JOIN job_roles j ON r.job_role_id = j.id;"
        )
    )

    if conn.in_transaction:
        conn.commit()
