from __future__ import annotations
from pathlib import Path
from datetime import datetime, timezone
import sqlalchemy as db
from sqlalchemy.exc import SQLAlchemyError
from studyplan.domain.errors import StorageFault


class SqlStorage:
    def __init__(self, url: str | Path) -> None:
        """
        url: np. 'sqlite:///data/studyplan.db' albo Path do pliku bazy (zamieniany na URL)
        """
        if isinstance(url, Path):
            url.parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{url}"
        else:
            db_url = url

        self.engine = db.create_engine(db_url, future=True)
        self.meta = db.MetaData()

        self.kv = db.Table(
            "kv",
            self.meta,
            db.Column("key", db.String, primary_key=True),
            db.Column("value", db.Text, nullable=False),
            db.Column("updated_at", db.String, nullable=False),  # ISO 8601 UTC
        )

        # utwórz tabelę, jeśli nie istnieje
        self.meta.create_all(self.engine)

    def get(self, key: str) -> str | None:
        stmt = db.select(self.kv.c.value).where(self.kv.c.key == key)
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise StorageFault(key, str(e))

    def set(self, key: str, blob: str) -> None:
        now = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        exists = db.select(db.literal(1)).select_from(self.kv).where(self.kv.c.key == key).limit(1)
        try:
            with self.engine.begin() as conn:
                if conn.execute(exists).first() is None:
                    conn.execute(db.insert(self.kv).values(key=key, value=blob, updated_at=now))
                else:
                    conn.execute(
                        db.update(self.kv)
                        .where(self.kv.c.key == key)
                        .values(value=blob, updated_at=now)
                    )
        except (SQLAlchemyError, OSError) as e:
            raise StorageFault(key, str(e))

    def close(self) -> None:
        self.engine.dispose()
