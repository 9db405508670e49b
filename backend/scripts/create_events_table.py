from db import get_conn
from settings import settings

DDL = '''
CREATE TABLE IF NOT EXISTS events (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    ts TIMESTAMP WITH TIME ZONE NOT NULL,
    type TEXT NOT NULL,
    category TEXT NOT NULL,
    name TEXT NOT NULL,
    value DOUBLE PRECISION,
    unit TEXT,
    CHECK ((value IS NULL) = (unit IS NULL))
);

CREATE INDEX IF NOT EXISTS idx_events_user_ts ON events (user_id, ts DESC);
'''


def main():
    print('Applying events schema to', settings.db_url)
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(DDL)
        conn.commit()
    print('DDL applied')


if __name__ == "__main__":
    main()
