"""Response library: canned replies staff reuse in case threads."""

from .models import SavedReply
from .repository import SavedReplyRepository
from .service import SavedReplyService

__all__ = ["SavedReply", "SavedReplyRepository", "SavedReplyService"]
