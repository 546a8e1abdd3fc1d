from __future__ import annotations

from ..extensions import db


class KeyValueEntry(db.Model):
    """
    One persisted collection.

    Each row holds the full JSON snapshot of a collection ("users",
    "products", "transactions"). Writes overwrite the whole value; there are
    no partial updates.
    """
    __tablename__ = "kv_store"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry key={self.key!r} bytes={len(self.value or '')}>"
