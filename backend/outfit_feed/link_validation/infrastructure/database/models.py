from sqlalchemy import Column, String, Boolean, DateTime, Text, JSON
from outfit_feed.shared.db_manager import Base
from ...domain.entity.product_link import MAX_OUTFIT_ID_LENGTH
from datetime import datetime


class ProductLinkModel(Base):
    __tablename__ = "product_links"

    id = Column(String(36), primary_key=True, comment="Link UUID")
    outfit_id = Column(String(MAX_OUTFIT_ID_LENGTH), nullable=True, index=True, comment="Parent outfit id")

    url = Column(Text, nullable=False, comment="Submitted URL")
    domain = Column(String(255), nullable=True, comment="Hostname, canonical after validation")
    status = Column(String(20), nullable=False, default="pending", index=True, comment="pending/valid/invalid")
    is_valid = Column(Boolean, nullable=False, default=False, comment="Mirror of status == valid")
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    link_metadata = Column("metadata", JSON, nullable=True, comment="Validation metadata")

    created_at = Column(DateTime, default=datetime.now, comment="Creation Time")
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, comment="Update Time")

    def __repr__(self):
        return f"<ProductLinkModel(id={self.id}, status={self.status})>"
