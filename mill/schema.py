SCHEMA_SQL = r"""
-- Business/owner metadata per user
CREATE TABLE IF NOT EXISTS profiles (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL UNIQUE,
  business_name TEXT,
  owner_name TEXT,
  location TEXT,
  phone TEXT,
  created_at TEXT NOT NULL,              -- ISO datetime (UTC)
  updated_at TEXT NOT NULL
);

-- Shipments of maize (inbound) or flour (outbound)
CREATE TABLE IF NOT EXISTS transports (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  reference TEXT NOT NULL,
  type TEXT NOT NULL,                    -- maize / flour
  status TEXT NOT NULL DEFAULT 'scheduled',  -- scheduled / in_transit / delivered
  quantity REAL NOT NULL,
  unit TEXT NOT NULL DEFAULT 'kg',
  origin TEXT NOT NULL,
  destination TEXT NOT NULL,
  driver_name TEXT NOT NULL DEFAULT '',
  driver_phone TEXT NOT NULL DEFAULT '',
  vehicle_number TEXT NOT NULL DEFAULT '',
  scheduled_date TEXT NOT NULL,
  estimated_arrival TEXT,
  actual_departure TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_transports_user ON transports(user_id, created_at);

-- Receipt confirmation, one per transport
CREATE TABLE IF NOT EXISTS deliveries (
  id TEXT PRIMARY KEY,
  user_id TEXT NOT NULL,
  transport_id TEXT NOT NULL UNIQUE,
  received_by TEXT NOT NULL,
  received_date TEXT NOT NULL,
  actual_quantity REAL NOT NULL,
  condition TEXT NOT NULL,               -- excellent / good / fair / damaged
  damage_claims TEXT,
  notes TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  FOREIGN KEY (transport_id) REFERENCES transports(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_deliveries_user ON deliveries(user_id, created_at);
"""
