import base64
import uuid
from typing import Dict, Optional, Tuple

from ..schemas.tryon import ImagePart


class PreviewStore:
    """In-memory preview handles, one per filled slot.

    Handles are released when their slot is replaced or reset.
    """

    def __init__(self):
        self._items: Dict[str, ImagePart] = {}

    def add(self, part: ImagePart) -> str:
        handle = uuid.uuid4().hex
        self._items[handle] = part
        return handle

    def get(self, handle: str) -> Optional[Tuple[str, bytes]]:
        part = self._items.get(handle)
        if part is None:
            return None
        return part.mime_type, base64.b64decode(part.data)

    def release(self, handle: str) -> None:
        self._items.pop(handle, None)

    def __len__(self) -> int:
        return len(self._items)
