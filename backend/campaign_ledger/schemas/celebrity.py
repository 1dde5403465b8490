from pydantic import BaseModel
from typing import Optional


class Celebrity(BaseModel):
    id: str
    name: str
    slug: str
    imageUrl: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_model(cls, celebrity) -> "Celebrity":
        return cls(
            id=celebrity.id,
            name=celebrity.name,
            slug=celebrity.slug,
            imageUrl=celebrity.image_url,
            category=celebrity.category,
        )
