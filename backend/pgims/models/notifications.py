from __future__ import annotations

from ..extensions import db
from pgims.time_utils import to_utc_z


class Notification(db.Model):
    """
    In-app notification addressed to one entity.

    The target is (notifiable_kind, notifiable_id); notifiable_kind is one of
    services.notification_service.NotifiableKind and the id is checked against
    that kind's table whenever the target is written.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_target", "notifiable_kind", "notifiable_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(64), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    notifiable_kind = db.Column(db.String(16), nullable=False)
    notifiable_id = db.Column(db.Integer, nullable=False)

    read_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "is_read": self.is_read,
            "notifiable_type": self.notifiable_kind,
            "notifiable_id": self.notifiable_id,
            "read_at": to_utc_z(self.read_at) if self.read_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
