"""
db/init_db.py
-------------
Creates the demo schema if it does not already exist: two tables, a
composite type, and one stored function for each return style
(RETURNS TABLE, RETURNS <composite>, RETURNS JSON).
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users table: the rows every demo function reads from
CREATE TABLE IF NOT EXISTS app_users (
    id              SERIAL PRIMARY KEY,
    name            TEXT NOT NULL,
    email           TEXT UNIQUE NOT NULL,
    status          TEXT NOT NULL DEFAULT 'active'
                    CHECK (status IN ('active', 'inactive', 'banned')),
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- Orders table: gives the summary and profile functions something to aggregate
CREATE TABLE IF NOT EXISTS user_orders (
    id              SERIAL PRIMARY KEY,
    user_id         INT NOT NULL REFERENCES app_users(id) ON DELETE CASCADE,
    amount          NUMERIC(12,2) NOT NULL,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_user_orders_user ON user_orders(user_id);

-- Composite type: CREATE TYPE has no IF NOT EXISTS
DO $$
BEGIN
    IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'user_summary') THEN
        CREATE TYPE user_summary AS (
            user_id         INT,
            name            TEXT,
            order_count     INT,
            total_spent     NUMERIC(12,2)
        );
    END IF;
END
$$;

-- Table-returning function: zero or more rows with named columns
CREATE OR REPLACE FUNCTION get_users_by_status(p_status TEXT)
RETURNS TABLE(id INT, name TEXT, email TEXT, created_at TIMESTAMPTZ) AS $$
    SELECT u.id, u.name, u.email, u.created_at
    FROM app_users u
    WHERE u.status = p_status
    ORDER BY u.id;
$$ LANGUAGE sql STABLE;

-- Composite-returning function: one row, all NULL for an unknown user
CREATE OR REPLACE FUNCTION get_user_summary(p_user_id INT)
RETURNS user_summary AS $$
    SELECT u.id,
           u.name,
           COUNT(o.id)::INT,
           COALESCE(SUM(o.amount), 0)::NUMERIC(12,2)
    FROM app_users u
    LEFT JOIN user_orders o ON o.user_id = u.id
    WHERE u.id = p_user_id
    GROUP BY u.id, u.name;
$$ LANGUAGE sql STABLE;

-- JSON-returning function: the whole profile pre-serialized by the server
CREATE OR REPLACE FUNCTION get_user_profile(p_user_id INT)
RETURNS JSON AS $$
    SELECT json_build_object(
        'id', u.id,
        'name', u.name,
        'email', u.email,
        'status', u.status,
        'created_at', u.created_at,
        'orders', COALESCE(
            (SELECT json_agg(json_build_object(
                        'id', o.id,
                        'amount', o.amount,
                        'created_at', o.created_at) ORDER BY o.id)
             FROM user_orders o
             WHERE o.user_id = u.id),
            '[]'::json)
    )
    FROM app_users u
    WHERE u.id = p_user_id;
$$ LANGUAGE sql STABLE;
"""

SEED_USERS = [
    ("Alice Martin", "alice@example.com", "active"),
    ("Bob Stone", "bob@example.com", "active"),
    ("Carol White", "carol@example.com", "inactive"),
]

SEED_ORDERS = [
    ("alice@example.com", 19.99),
    ("alice@example.com", 42.50),
    ("bob@example.com", 7.25),
]


def create_tables() -> None:
    """
    Execute the schema SQL to create tables, the composite type and functions.
    Safe to call multiple times.
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


def seed_demo_data() -> bool:
    """
    Insert demo users and orders when app_users is empty.

    Returns:
        True if rows were inserted, False if data was already present.
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT EXISTS (SELECT 1 FROM app_users);")
            if cur.fetchone()[0]:
                logger.info("Demo data already present, skipping seed.")
                return False
            cur.executemany(
                "INSERT INTO app_users (name, email, status) VALUES (%s, %s, %s);",
                SEED_USERS,
            )
            cur.executemany(
                """
                INSERT INTO user_orders (user_id, amount)
                SELECT id, %s FROM app_users WHERE email = %s;
                """,
                [(amount, email) for email, amount in SEED_ORDERS],
            )
        conn.commit()
        logger.info(f"Seeded {len(SEED_USERS)} users and {len(SEED_ORDERS)} orders.")
        return True
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to seed demo data: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    seed_demo_data()
    print("✅ Database schema created successfully.")
