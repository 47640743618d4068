from __future__ import annotations

from ..extensions import db
from ..enums import CatalogStatus, RollStatus, ACTIVE_ROLL_STATUSES
from ..time_utils import to_utc_z, utcnow
from .common import new_id


_ACTIVE_STATUS_SQL = ", ".join(f"'{s}'" for s in ACTIVE_ROLL_STATUSES)
ACTIVE_BARCODE_PREDICATE = f"deleted_at IS NULL AND status IN ({_ACTIVE_STATUS_SQL})"


class Catalog(db.Model):
    """
    Fabric catalog (design/material family that rolls belong to).

    `code` is unique, stored upper-case, and immutable after creation.
    """
    __tablename__ = "catalogs"
    __table_args__ = (
        db.Index("ix_catalogs_status", "status"),
        db.Index("ix_catalogs_created_by", "created_by"),
        db.Index("ix_catalogs_deleted_at", "deleted_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    code = db.Column(db.String(20), nullable=False, unique=True, index=True)
    name = db.Column(db.String(100), nullable=False)
    material = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=CatalogStatus.ACTIVE.value)
    image = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    updated_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "material": self.material,
            "description": self.description,
            "status": self.status,
            "image": self.image,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
            "createdBy": self.created_by or "",
            "updatedBy": self.updated_by or "",
            "deletedAt": to_utc_z(self.deleted_at),
            "deletedBy": self.deleted_by,
        }


class Roll(db.Model):
    """
    A physical fabric roll.

    Barcodes are not globally unique: a barcode may be reused once its holder
    is sold or deleted. At most one *active* roll (not deleted, status
    in_stock/reserved) may hold a barcode; uq_rolls_active_barcode enforces it
    in storage so the service-level pre-check is only a fast path.
    """
    __tablename__ = "rolls"
    __table_args__ = (
        db.Index("ix_rolls_barcode_status", "barcode", "status"),
        db.Index("ix_rolls_deleted_at", "deleted_at"),
        db.Index(
            "uq_rolls_active_barcode",
            "barcode",
            unique=True,
            sqlite_where=db.text(ACTIVE_BARCODE_PREDICATE),
            postgresql_where=db.text(ACTIVE_BARCODE_PREDICATE),
        ),
        db.CheckConstraint("length_meters > 0", name="ck_rolls_length_positive"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    barcode = db.Column(db.String(50), nullable=False, index=True)
    catalog_id = db.Column(db.String(36), db.ForeignKey("catalogs.id"), nullable=False, index=True)
    color = db.Column(db.String(50), nullable=False)
    degree = db.Column(db.String(1), nullable=False)
    length_meters = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RollStatus.IN_STOCK.value, index=True)
    location = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    updated_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    catalog = db.relationship("Catalog", backref=db.backref("rolls", lazy="dynamic"))

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None and self.status in ACTIVE_ROLL_STATUSES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "barcode": self.barcode,
            "catalogId": self.catalog_id,
            "color": self.color,
            "degree": self.degree,
            "lengthMeters": self.length_meters,
            "status": self.status,
            "location": self.location,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
            "createdBy": self.created_by or "",
            "updatedBy": self.updated_by or "",
            "deletedAt": to_utc_z(self.deleted_at),
            "deletedBy": self.deleted_by,
        }
