from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class Screen(str, Enum):
    UPLOAD = "upload"
    RESULT = "result"


class Slot(str, Enum):
    PERSON = "person"
    CLOTHING = "clothing"


class ImagePart(BaseModel):
    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: str

    def to_request_part(self) -> Dict[str, Any]:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


class SourceFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: Optional[str] = None
    content_type: Optional[str] = None
    size: int


class UploadedImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: SourceFile
    preview: str
    part: ImagePart


class ViewState(BaseModel):
    model_config = ConfigDict(frozen=True)

    screen: Screen = Screen.UPLOAD
    person: Optional[UploadedImage] = None
    clothing: Optional[UploadedImage] = None
    is_generating: bool = False
    upload_error: Optional[str] = None
    generation_error: Optional[str] = None
    result: Optional[str] = None
    epoch: int = 0

    def slot(self, slot: Slot) -> Optional[UploadedImage]:
        return self.person if slot is Slot.PERSON else self.clothing

    @property
    def can_generate(self) -> bool:
        return self.person is not None and self.clothing is not None and not self.is_generating


# ---- API output ----


class SlotOut(BaseModel):
    filename: Optional[str] = None
    mime_type: str
    size: int
    preview_url: str


class StateOut(BaseModel):
    screen: Screen
    person: Optional[SlotOut] = None
    clothing: Optional[SlotOut] = None
    is_generating: bool
    can_generate: bool
    upload_error: Optional[str] = None
    generation_error: Optional[str] = None
    result_url: Optional[str] = None


class SamplesOut(BaseModel):
    person: List[str]
    clothing: List[str]


class ShareOut(BaseModel):
    title: str
    text: str
    filename: str
    mime_type: str
    data_url: str
