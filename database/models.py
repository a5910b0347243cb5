"""Database models and schemas."""

# Key-value records, one row per (player, record key). The value is a JSON
# document owned by database.store.GameStore.

CREATE_KV_STORE_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    owner_id TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (owner_id, key)
);
"""

# Indexes for performance
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_kv_store_owner ON kv_store(owner_id);",
]
