from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, List, Optional

from utils.timeutil import to_iso, utc_now


class ActivityRepo:
    """Append-only audit trail of workflow actions and verification verdicts."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def record(
        self,
        actor_id: str,
        action_type: str,
        entity_type: str,
        entity_id: Optional[int],
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        at_iso: Optional[str] = None,
    ) -> int:
        sql = (
            "INSERT INTO activity_log (actor_id, action_type, entity_type, entity_id, description, metadata_json, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?) RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (
            str(actor_id),
            action_type,
            entity_type,
            entity_id,
            description,
            json.dumps(metadata, ensure_ascii=False, sort_keys=True) if metadata else None,
            at_iso or to_iso(utc_now()),
        ))
        row = cur.fetchone()
        return int(row[0])

    def for_entity(self, entity_type: str, entity_id: int) -> List[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT id, actor_id, action_type, description, metadata_json, created_at FROM activity_log "
            "WHERE entity_type = ? AND entity_id = ? ORDER BY id",
            (entity_type, entity_id),
        )
        out: List[Dict[str, Any]] = []
        for r in cur.fetchall():
            out.append({
                "id": r[0],
                "actor_id": r[1],
                "action_type": r[2],
                "description": r[3],
                "metadata": json.loads(r[4]) if r[4] else {},
                "created_at": r[5],
            })
        return out
