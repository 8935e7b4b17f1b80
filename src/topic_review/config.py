"""Runtime configuration defaults."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DB_PATH = os.environ.get(
    "TOPIC_REVIEW_DB", str(Path.home() / ".topic_review" / "review.db")
)

# Rounds a review may run before it is closed without mastery.
DEFAULT_MAX_ROUNDS = 10

DEFAULT_USER = os.environ.get("TOPIC_REVIEW_USER", "default_user")
