"""
Approval Letter Compiler - assembles architectural approval letters with their attachments.

This package renders an approval letter and merges site photos, submitted
plans and the association's reference document into one paginated PDF, with a
degraded image-only fallback when the primary merge path cannot run.
"""

__version__ = "1.0.0"
__author__ = "Architectural Review Committee"

from .core.assembler import ApprovalLetterAssembler, make_groups
from .core.config import Config
from .core.models import AttachmentFile, AttachmentGroup, FormData, GenerationResult
from .utils.resources import LogoProvider, ReferenceDocumentLoader

__all__ = [
    'ApprovalLetterAssembler',
    'AttachmentFile',
    'AttachmentGroup',
    'Config',
    'FormData',
    'GenerationResult',
    'LogoProvider',
    'ReferenceDocumentLoader',
    'make_groups',
]
