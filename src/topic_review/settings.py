"""Per-database user settings."""
from topic_review.config import DEFAULT_MAX_ROUNDS
from topic_review.db import get_connection


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_max_rounds(db_path: str) -> int | None:
    """Effective round cap. A stored "0" or "none" disables the cap."""
    value = get_setting(db_path, "max_rounds")
    if value is None:
        return DEFAULT_MAX_ROUNDS
    value = value.strip().lower()
    if value in ("0", "none", ""):
        return None
    try:
        rounds = int(value)
    except ValueError:
        raise ValueError(f"Invalid max_rounds setting: {value!r}") from None
    if rounds < 0:
        raise ValueError(f"Invalid max_rounds setting: {value!r}")
    return rounds


def set_max_rounds(db_path: str, rounds: int | None) -> None:
    if rounds is not None and rounds < 0:
        raise ValueError("max_rounds must be positive")
    set_setting(db_path, "max_rounds", "none" if not rounds else str(rounds))
