# init_db.py

from app.db.session import Base, engine
import app.db.models  # noqa: F401


def init():
    print(f"Connecting to database ({engine.dialect.name})...")

    print("Creating tables (if not exist)...")
    Base.metadata.create_all(bind=engine)

    print("✅ Done.")


if __name__ == "__main__":
    init()
