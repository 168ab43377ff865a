from vocab_drill.db import models  # noqa: F401
from vocab_drill.db.base import Base
from vocab_drill.db.session import engine

if __name__ == "__main__":
    print("Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created.")
