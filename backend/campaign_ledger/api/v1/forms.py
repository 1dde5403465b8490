"""
Decoding of the multipart campaign form into plain campaign/template records
"""

import re
from typing import Dict, List, Optional, Tuple

from starlette.datastructures import FormData, UploadFile

from campaign_ledger.core.exceptions import ValidationError
from campaign_ledger.schemas.campaign import CampaignCreate
from campaign_ledger.services.ledger import MAX_TOKENS
from campaign_ledger.services.storage import ImageUpload
from campaign_ledger.services.template_validator import TemplateInput

# templates[0][name], templates[3][previewImage], ...
TEMPLATE_FIELD = re.compile(r"^templates\[(\d+)\]\[(\w+)\]$")

TEMPLATE_TEXT_FIELDS = {"name", "prompt", "description", "category", "tags"}


def parse_tokens(raw) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0
    try:
        tokens = int(str(raw).strip())
    except ValueError:
        raise ValidationError("Tokens must be a whole number", field="tokens")
    if tokens > MAX_TOKENS:
        raise ValidationError(f"Tokens must not exceed {MAX_TOKENS}", field="tokens")
    return tokens


def _text(value) -> str:
    if isinstance(value, UploadFile):
        return ""
    return value if value is not None else ""


async def _read_upload(upload: UploadFile) -> Optional[ImageUpload]:
    data = await upload.read()
    if not upload.filename and not data:
        return None
    return ImageUpload(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


async def parse_campaign_form(form: FormData) -> Tuple[CampaignCreate, List[TemplateInput]]:
    """
    Split a provisioning form into campaign metadata and an ordered template list.

    Template entries arrive as ``templates[i][field]`` parts; they are grouped
    by ``i`` and returned in ascending index order. Unknown fields are ignored.
    """
    meta = CampaignCreate(
        name=_text(form.get("name")),
        description=_text(form.get("description")) or None,
        candidateName=_text(form.get("candidateName")) or None,
        celebrityId=_text(form.get("celebrityId")),
        tokens=parse_tokens(_text(form.get("tokens"))),
    )

    entries: Dict[int, TemplateInput] = {}
    for key, value in form.multi_items():
        match = TEMPLATE_FIELD.match(key)
        if not match:
            continue
        index, field = int(match.group(1)), match.group(2)
        entry = entries.setdefault(index, TemplateInput())

        if field == "previewImage":
            if isinstance(value, UploadFile):
                entry.preview_image = await _read_upload(value)
        elif field in TEMPLATE_TEXT_FIELDS:
            setattr(entry, field, _text(value))

    templates = [entries[index] for index in sorted(entries)]
    return meta, templates
