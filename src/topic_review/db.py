"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from topic_review.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS questions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    domain TEXT NOT NULL,
    topic TEXT NOT NULL,
    question_text TEXT NOT NULL,
    option_a TEXT NOT NULL,
    option_b TEXT NOT NULL,
    option_c TEXT NOT NULL,
    option_d TEXT,
    option_e TEXT,
    correct_answer TEXT NOT NULL,
    question_type TEXT NOT NULL DEFAULT 'single'
        CHECK (question_type IN ('single', 'multiple')),
    explanation TEXT
);

CREATE INDEX IF NOT EXISTS idx_questions_topic ON questions(topic);

CREATE TABLE IF NOT EXISTS topics (
    topic TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT
);

CREATE TABLE IF NOT EXISTS review_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    topic TEXT NOT NULL,
    current_round INTEGER NOT NULL DEFAULT 1,
    remaining TEXT NOT NULL DEFAULT '[]',  -- JSON list of question ids
    status TEXT NOT NULL DEFAULT 'active'
        CHECK (status IN ('active', 'completed')),
    mastery_achieved INTEGER,
    started_at TEXT NOT NULL,
    completed_at TEXT,
    last_activity TEXT,
    version INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_review_sessions_user ON review_sessions(user_id, topic);

CREATE TABLE IF NOT EXISTS review_rounds (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL REFERENCES review_sessions(id),
    round_number INTEGER NOT NULL,
    question_ids TEXT NOT NULL,  -- JSON
    incorrect_ids TEXT NOT NULL,  -- JSON
    correct_count INTEGER NOT NULL,
    total_count INTEGER NOT NULL,
    percentage INTEGER NOT NULL,
    submitted_at TEXT NOT NULL,
    UNIQUE(session_id, round_number)
);

CREATE TABLE IF NOT EXISTS review_attempts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL REFERENCES review_sessions(id),
    question_id INTEGER NOT NULL,
    round_number INTEGER NOT NULL,
    selected_answer TEXT,
    is_correct INTEGER NOT NULL,
    answered_at TEXT
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
