"""
Default configuration values for navbot.
"""

DEFAULT_CONFIG_DIR = "~/.navbot"
DEFAULT_CONFIG_FILE = "config.yaml"

# Environment variables that override file settings
ENV_TOKEN_VARS = ("BOT_TOKEN", "TELEGRAM_TOKEN", "TELEGRAM_BOT_TOKEN")
ENV_DATABASE_URL = "DATABASE_URL"
ENV_ADMIN_IDS = "ADMIN_ID"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_STATE_BACKEND = "STATE_BACKEND"

STATE_BACKENDS = ("memory", "sql")

DEFAULT_CONFIG_YAML = """\
# navbot configuration
# Secrets belong in .env (BOT_TOKEN, ADMIN_ID), not in this file.

telegram:
  admin_ids: []
  drop_pending_updates: true
  connect_timeout: 10.0
  read_timeout: 10.0
  write_timeout: 10.0

database:
  url: sqlite+aiosqlite:///navbot.sqlite3
  echo: false

broadcast:
  delay_seconds: 0.05   # pause between sends (Telegram allows ~30 msg/s)
  max_concurrency: 1

state:
  backend: memory       # memory | sql

logging:
  level: INFO
"""
