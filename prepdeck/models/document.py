from sqlalchemy import BigInteger, Column, Integer, JSON, String, UniqueConstraint
from prepdeck.database import Base


class DocumentRecord(Base):
    """One JSON document of a collection, the SQL rendition of a document store."""

    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(100), nullable=False, index=True)
    doc_id = Column(String(255), nullable=False)

    # Copied out of the JSON body so per-user queries can use an index
    owner_id = Column(String(255), nullable=True, index=True)

    data = Column(JSON, nullable=False)

    # Bumped on every write; compare-and-swap token for transactions
    version = Column(Integer, nullable=False, default=1)

    # Unix milliseconds
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
