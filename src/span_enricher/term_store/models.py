"""
SQLAlchemy models for the term store.
"""

from sqlalchemy import JSON, Column, String, TIMESTAMP
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TermRecord(Base):
    """
    One term of the external vocabulary (e.g. an NCBITaxon organism name).

    ``label`` is stored lowercased; ``features`` holds the attributes copied
    onto matching annotations (``{"taxonId": "9615", ...}``).
    """

    __tablename__ = "terms"

    label = Column(String, primary_key=True)  # lowercased surface form
    features = Column(JSON, nullable=False)
    source = Column(String, nullable=True)  # e.g. "ncbitaxon"
    loaded_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<TermRecord(label={self.label}, source={self.source})>"
