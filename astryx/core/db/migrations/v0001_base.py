DDL = """
CREATE TABLE IF NOT EXISTS accounts (
  user_id      TEXT PRIMARY KEY,
  display_name TEXT NOT NULL DEFAULT '',
  is_bot       INTEGER NOT NULL DEFAULT 0 CHECK (is_bot IN (0,1)),
  coins        INTEGER NOT NULL DEFAULT 1000 CHECK (coins >= 0),
  xp           INTEGER NOT NULL DEFAULT 0 CHECK (xp >= 0),
  level        INTEGER NOT NULL DEFAULT 1 CHECK (level >= 1),
  daily_streak INTEGER NOT NULL DEFAULT 0,
  last_daily   INTEGER,
  last_work    INTEGER,
  rob_attempts INTEGER NOT NULL DEFAULT 0,
  created_ts   INTEGER NOT NULL DEFAULT (strftime('%s','now')),
  updated_ts   INTEGER NOT NULL DEFAULT (strftime('%s','now'))
);
CREATE INDEX IF NOT EXISTS idx_accounts_coins ON accounts(coins DESC);
CREATE INDEX IF NOT EXISTS idx_accounts_xp ON accounts(xp DESC);

CREATE TABLE IF NOT EXISTS items (
  item_id     INTEGER PRIMARY KEY AUTOINCREMENT,
  name        TEXT NOT NULL UNIQUE,
  description TEXT NOT NULL DEFAULT '',
  price       INTEGER NOT NULL CHECK (price > 0),
  category    TEXT NOT NULL CHECK (category IN ('tool','weapon','collectible','consumable','upgrade')),
  rarity      TEXT NOT NULL CHECK (rarity IN ('common','uncommon','rare','epic','legendary')),
  effect_json TEXT
);
CREATE INDEX IF NOT EXISTS idx_items_price ON items(price);

CREATE TABLE IF NOT EXISTS inventory (
  user_id     TEXT NOT NULL REFERENCES accounts(user_id),
  item_id     INTEGER NOT NULL REFERENCES items(item_id),
  qty         INTEGER NOT NULL CHECK (qty > 0),
  acquired_ts INTEGER NOT NULL DEFAULT (strftime('%s','now')),
  PRIMARY KEY (user_id, item_id)
);

CREATE TABLE IF NOT EXISTS cooldowns (
  user_id    TEXT NOT NULL REFERENCES accounts(user_id),
  command    TEXT NOT NULL CHECK (command IN ('daily','work','rob')),
  expires_at INTEGER NOT NULL,
  PRIMARY KEY (user_id, command)
);
CREATE INDEX IF NOT EXISTS idx_cooldowns_expires ON cooldowns(expires_at);

CREATE TABLE IF NOT EXISTS transactions (
  id             INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id        TEXT NOT NULL,
  type           TEXT NOT NULL CHECK (type IN ('daily','work','pay','rob','shop_buy','shop_sell','use_item')),
  amount         INTEGER,
  target_user_id TEXT,
  item_id        INTEGER,
  metadata_json  TEXT NOT NULL DEFAULT '{}',
  ts             INTEGER NOT NULL DEFAULT (strftime('%s','now'))
);
CREATE INDEX IF NOT EXISTS idx_transactions_user_ts ON transactions(user_id, ts);

CREATE TABLE IF NOT EXISTS server_settings (
  id                   INTEGER PRIMARY KEY CHECK (id = 1),
  daily_amount         INTEGER NOT NULL DEFAULT 500,
  daily_cooldown_hours INTEGER NOT NULL DEFAULT 24,
  work_min_amount      INTEGER NOT NULL DEFAULT 100,
  work_max_amount      INTEGER NOT NULL DEFAULT 500,
  work_cooldown_hours  INTEGER NOT NULL DEFAULT 4,
  rob_success_rate     REAL NOT NULL DEFAULT 0.40,
  rob_cooldown_hours   INTEGER NOT NULL DEFAULT 12,
  rob_penalty_percent  REAL NOT NULL DEFAULT 0.20,
  xp_multiplier        REAL NOT NULL DEFAULT 1.00,
  updated_ts           INTEGER NOT NULL DEFAULT (strftime('%s','now'))
);
INSERT OR IGNORE INTO server_settings(id) VALUES (1);
"""
def apply(con): con.executescript(DDL)
