from prepdeck.models.document import DocumentRecord

__all__ = ["DocumentRecord"]
