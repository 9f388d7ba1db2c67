"""Pure transitions of the try-on view state.

Every function takes a ViewState and returns a new one; nothing here
touches I/O, so the whole upload -> generating -> result -> reset cycle can
be checked without a server or an event loop.
"""

from typing import List, Optional, Tuple

from ..core.errors import MISSING_IMAGES_MESSAGE, NO_IMAGE_MESSAGE, TransitionError
from ..schemas.tryon import Screen, Slot, UploadedImage, ViewState


def _require_upload_screen(state: ViewState, action: str) -> None:
    if state.is_generating:
        raise TransitionError(f"cannot {action} while a generation is in progress")
    if state.screen is not Screen.UPLOAD:
        raise TransitionError(f"cannot {action} on the {state.screen.value} screen")


def clear_upload_error(state: ViewState) -> ViewState:
    return state.model_copy(update={"upload_error": None})


def set_upload_error(state: ViewState, message: str) -> ViewState:
    return state.model_copy(update={"upload_error": message})


def fill_slot(state: ViewState, slot: Slot, image: UploadedImage) -> Tuple[ViewState, Optional[UploadedImage]]:
    """Put an encoded image into a slot; returns the image it displaced."""
    _require_upload_screen(state, "select an image")
    replaced = state.slot(slot)
    new = state.model_copy(update={slot.value: image, "upload_error": None})
    return new, replaced


def start_generation(state: ViewState) -> ViewState:
    """Move to the result screen and open a new epoch.

    With a slot still empty this only records the prompt-for-both message;
    callers check ``is_generating`` on the returned state.
    """
    _require_upload_screen(state, "start generation")
    if state.person is None or state.clothing is None:
        return set_upload_error(state, MISSING_IMAGES_MESSAGE)

    return state.model_copy(
        update={
            "screen": Screen.RESULT,
            "is_generating": True,
            "upload_error": None,
            "generation_error": None,
            "result": None,
            "epoch": state.epoch + 1,
        }
    )


def _is_current(state: ViewState, epoch: int) -> bool:
    return state.is_generating and state.epoch == epoch


def complete_generation(state: ViewState, epoch: int, image: Optional[str]) -> ViewState:
    if not _is_current(state, epoch):
        return state
    if image:
        return state.model_copy(update={"is_generating": False, "result": image, "generation_error": None})
    return state.model_copy(update={"is_generating": False, "result": None, "generation_error": NO_IMAGE_MESSAGE})


def fail_generation(state: ViewState, epoch: int, message: str) -> ViewState:
    if not _is_current(state, epoch):
        return state
    return state.model_copy(update={"is_generating": False, "result": None, "generation_error": message})


def reset(state: ViewState) -> Tuple[ViewState, List[UploadedImage]]:
    """Back to an empty upload screen from any settled state.

    Refused while a generation is outstanding. The epoch still moves on, so
    any completion carrying an older token is ignored.
    """
    if state.is_generating:
        raise TransitionError("cannot reset while a generation is in progress")
    released = [img for img in (state.person, state.clothing) if img is not None]
    return ViewState(epoch=state.epoch + 1), released
