"""Facts derived from a ticket's raw attachment descriptor."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AttachmentInsights:
    has_attachments: bool = False
    attachment_count: int = 0
    has_image_attachment: bool = False
    image_attachment_count: int = 0
    context_for_nlp: str = ""
