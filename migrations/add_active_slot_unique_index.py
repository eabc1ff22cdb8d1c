"""
Add the active-slot unique index to appointments

create_all() only builds indexes for new tables, so databases created before
the index existed need this once. Older rows may store slot times as "HH:MM";
those are rewritten to "HH:MM:SS" first so the index compares like with like.
At most one non-cancelled appointment may hold a (date, time) slot; existing
collisions are listed and must be resolved (cancel one of each pair) before
the index can be created.

Run with: python migrations/add_active_slot_unique_index.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from staffdesk.database import engine

INDEX_NAME = "uq_appointments_active_slot"


def normalize_stored_times(conn) -> int:
    """Append ':00' to every HH:MM time; returns the number of rows rewritten"""
    rewritten = 0
    for table, column in (("appointments", "appointment_time"), ("blocked_times", "block_time")):
        result = conn.execute(text(f"""
            UPDATE {table}
            SET {column} = {column} || '\\:00'
            WHERE LENGTH({column}) = 5
        """))
        rewritten += result.rowcount or 0
    return rewritten


def find_slot_collisions(conn) -> list:
    result = conn.execute(text("""
        SELECT appointment_date, appointment_time, COUNT(*) AS bookings
        FROM appointments
        WHERE status <> 'cancelled'
        GROUP BY appointment_date, appointment_time
        HAVING COUNT(*) > 1
    """))
    return list(result)


def upgrade(bind=None):
    """Normalize stored times, then create the partial unique index"""
    with (bind or engine).connect() as conn:
        rewritten = normalize_stored_times(conn)
        conn.commit()
        if rewritten:
            print(f"✅ Normalized {rewritten} stored times to HH:MM:SS")

        collisions = find_slot_collisions(conn)
        if collisions:
            print("❌ Slots with more than one active appointment:")
            for appointment_date, appointment_time, bookings in collisions:
                print(f"   {appointment_date} {appointment_time}: {bookings} appointments")
            print("\nCancel the extra appointments and run the migration again.")
            return False

        conn.execute(text(f"""
            CREATE UNIQUE INDEX IF NOT EXISTS {INDEX_NAME}
            ON appointments (appointment_date, appointment_time)
            WHERE status <> 'cancelled'
        """))
        conn.commit()
        print(f"✅ Index {INDEX_NAME} is in place")
        return True


def downgrade(bind=None):
    """Drop the partial unique index"""
    with (bind or engine).connect() as conn:
        conn.execute(text(f"DROP INDEX IF EXISTS {INDEX_NAME}"))
        conn.commit()
        print(f"✅ Dropped index {INDEX_NAME}")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "downgrade":
        downgrade()
    else:
        sys.exit(0 if upgrade() else 1)
