from __future__ import annotations

from ..extensions import db


class SequenceCounter(db.Model):
    """
    Persisted counter per sequence domain (product codes, invoice numbers).

    WHY: Counter increments go through a single UPDATE on this row instead of
    an unguarded read-modify-write, so two windows cannot hand out the same value.
    """
    __tablename__ = "sequence_counters"
    __table_args__ = (
        db.UniqueConstraint("key", name="uq_sequence_counters_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(64), nullable=False, index=True)
    value = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
        }
