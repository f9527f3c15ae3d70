from datetime import datetime, timezone

from app.db.session import SessionLocal


# every request that needs DB will get a fresh session, and it will always close.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# rollups are evaluated against a single "now" per request; tests override this
def get_now() -> datetime:
    return datetime.now(timezone.utc)
