from typing import Optional

from schemas.base import CamelModel


class UploadedImage(CamelModel):
    url: str
    public_id: Optional[str] = None
