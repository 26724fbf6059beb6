import sqlite3
import json
import logging

import settings

logger = logging.getLogger(__name__)

# slot holding the last edited inputs, restored on the next session
AUTOSAVE_NAME = "__autosave__"


def get_conn():
    settings.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(settings.DB_PATH)

def init_db():
    with get_conn() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS scenarios (
                id INTEGER PRIMARY KEY,
                name TEXT UNIQUE,
                payload TEXT
            )
        """)

def save_scenario(name: str, payload: dict):
    with get_conn() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO scenarios (name, payload) VALUES (?, ?)",
            (name, json.dumps(payload))
        )
    logger.debug("Saved scenario %r", name)

def load_scenario(name: str):
    with get_conn() as conn:
        row = conn.execute(
            "SELECT payload FROM scenarios WHERE name = ?",
            (name,)
        ).fetchone()
        return json.loads(row[0]) if row else None

def delete_scenario(name: str):
    with get_conn() as conn:
        conn.execute("DELETE FROM scenarios WHERE name = ?", (name,))

def list_scenarios():
    with get_conn() as conn:
        return [
            r[0] for r in conn.execute(
                "SELECT name FROM scenarios WHERE name != ? ORDER BY name",
                (AUTOSAVE_NAME,)
            )
        ]

def autosave(payload: dict):
    """Save-on-change hook: keeps only the raw inputs, never computed output."""
    save_scenario(AUTOSAVE_NAME, payload)

def restore_autosave():
    return load_scenario(AUTOSAVE_NAME)
