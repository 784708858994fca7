from sqlalchemy import JSON, Column, DateTime, Integer, func

from db.base import Base


class Rule(Base):
    """Rules extracted from rules_upload_pdf documents."""

    __tablename__ = "rules"

    id = Column(Integer, primary_key=True, index=True)
    data = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class RagRule(Base):
    """Retrieval-augmented rules derived from the same documents."""

    __tablename__ = "rag_rules"

    id = Column(Integer, primary_key=True, index=True)
    data = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
