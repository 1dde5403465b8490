"""
Validation of the template bundle submitted with a new campaign
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from campaign_ledger.core.exceptions import (
    EmptyBundle, MissingPlaceholder, MissingRequiredField, StorageRejected,
)
from campaign_ledger.models.campaign import DEFAULT_TEMPLATE_CATEGORY
from campaign_ledger.services.storage import ImageStorage, ImageUpload

logger = logging.getLogger(__name__)

CELEBRITY_PLACEHOLDER = "{{celeb_name}}"


@dataclass
class TemplateInput:
    """One template definition as submitted by an administrator"""
    name: Optional[str] = None
    prompt: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[str] = None  # comma-separated
    preview_image: Optional[ImageUpload] = None


@dataclass
class ValidatedTemplate:
    name: str
    prompt: str
    description: Optional[str] = None
    category: str = DEFAULT_TEMPLATE_CATEGORY
    tags: List[str] = field(default_factory=list)
    preview_image: Optional[ImageUpload] = None


def parse_tags(raw: Optional[str]) -> List[str]:
    """Split a comma-separated tag string, trimming and dropping empty entries"""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def validate_bundle(
    templates: Sequence[TemplateInput],
    storage: Optional[ImageStorage] = None,
    require_placeholder: bool = False,
) -> List[ValidatedTemplate]:
    """
    Validate a batch of template definitions.

    Rules are applied in order across the whole bundle and the first
    failure is raised: the bundle must be non-empty, every entry needs a
    name and a prompt, prompts must carry the celebrity placeholder when
    ``require_placeholder`` is set, and attached preview images must be
    accepted by ``storage``. Tags are parsed from their comma-separated form
    and a blank category falls back to the default. Output order matches
    input order.
    """
    if not templates:
        raise EmptyBundle()

    for index, template in enumerate(templates):
        if not (template.name or "").strip():
            raise MissingRequiredField("name", index)
        prompt = (template.prompt or "").strip()
        if not prompt:
            raise MissingRequiredField("prompt", index)
        if require_placeholder and CELEBRITY_PLACEHOLDER not in prompt:
            raise MissingPlaceholder(CELEBRITY_PLACEHOLDER, index)

    if storage is not None:
        for index, template in enumerate(templates):
            if template.preview_image is None:
                continue
            try:
                storage.check(template.preview_image)
            except StorageRejected as e:
                e.index = index
                raise

    validated = []
    for template in templates:
        validated.append(ValidatedTemplate(
            name=template.name.strip(),
            prompt=template.prompt.strip(),
            description=(template.description or "").strip() or None,
            category=(template.category or "").strip() or DEFAULT_TEMPLATE_CATEGORY,
            tags=parse_tags(template.tags),
            preview_image=template.preview_image,
        ))

    logger.debug(f"Validated bundle of {len(validated)} templates")
    return validated
