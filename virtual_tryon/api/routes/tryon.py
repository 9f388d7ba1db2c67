from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response

from virtual_tryon.core.errors import TransitionError, UploadError
from virtual_tryon.core.prompts import RESULT_FILENAME, SAMPLE_CLOTHING, SAMPLE_PEOPLE, SHARE_TEXT, SHARE_TITLE
from virtual_tryon.schemas.tryon import SamplesOut, ShareOut, Slot, SlotOut, StateOut, UploadedImage, ViewState
from virtual_tryon.services.image_utils import result_to_jpeg, to_data_url
from virtual_tryon.services.session import TryOnSession

router = APIRouter()

RESULT_MIME = "image/jpeg"


def get_session(request: Request) -> TryOnSession:
    return request.app.state.session


def _slot_out(image: UploadedImage) -> SlotOut:
    return SlotOut(
        filename=image.source.filename,
        mime_type=image.part.mime_type,
        size=image.source.size,
        preview_url=f"/previews/{image.preview}",
    )


def render_state(state: ViewState) -> StateOut:
    return StateOut(
        screen=state.screen,
        person=_slot_out(state.person) if state.person else None,
        clothing=_slot_out(state.clothing) if state.clothing else None,
        is_generating=state.is_generating,
        can_generate=state.can_generate,
        upload_error=state.upload_error,
        generation_error=state.generation_error,
        result_url=to_data_url(RESULT_MIME, state.result) if state.result else None,
    )


@router.get("/state", response_model=StateOut)
async def get_state(session: TryOnSession = Depends(get_session)):
    return render_state(session.state)


@router.post("/uploads/{slot}", response_model=StateOut)
async def upload_image(slot: Slot, file: UploadFile = File(...), session: TryOnSession = Depends(get_session)):
    try:
        state = await session.select_image(file, slot)
    except UploadError as e:
        raise HTTPException(400, e.message)
    except TransitionError as e:
        raise HTTPException(409, str(e))
    return render_state(state)


@router.get("/samples", response_model=SamplesOut)
async def list_samples():
    return SamplesOut(person=SAMPLE_PEOPLE, clothing=SAMPLE_CLOTHING)


@router.post("/samples/{slot}/{index}", response_model=StateOut)
async def use_sample(slot: Slot, index: int, session: TryOnSession = Depends(get_session)):
    try:
        state = await session.select_sample(slot, index)
    except IndexError as e:
        raise HTTPException(404, str(e))
    except UploadError as e:
        raise HTTPException(400, e.message)
    except TransitionError as e:
        raise HTTPException(409, str(e))
    return render_state(state)


@router.post("/tryon", response_model=StateOut, status_code=202)
async def tryon(response: Response, wait: bool = False, session: TryOnSession = Depends(get_session)):
    try:
        task = session.request_generation()
    except TransitionError as e:
        raise HTTPException(409, str(e))

    if task is None:
        raise HTTPException(400, session.state.upload_error)
    if wait:
        await session.wait()
        response.status_code = 200
    return render_state(session.state)


@router.post("/reset", response_model=StateOut)
async def reset(session: TryOnSession = Depends(get_session)):
    try:
        state = session.reset()
    except TransitionError as e:
        raise HTTPException(409, str(e))
    return render_state(state)


@router.get("/previews/{handle}")
async def preview(handle: str, session: TryOnSession = Depends(get_session)):
    item = session.previews.get(handle)
    if item is None:
        raise HTTPException(404, "preview not found")
    mime, data = item
    return Response(content=data, media_type=mime)


@router.get("/result/download")
async def download_result(session: TryOnSession = Depends(get_session)):
    result = session.state.result
    if not result:
        raise HTTPException(404, "no result yet")
    return Response(
        content=result_to_jpeg(result),
        media_type=RESULT_MIME,
        headers={"Content-Disposition": f'attachment; filename="{RESULT_FILENAME}"'},
    )


@router.get("/result/share", response_model=ShareOut)
async def share_result(session: TryOnSession = Depends(get_session)):
    result = session.state.result
    if not result:
        raise HTTPException(404, "no result yet")
    return ShareOut(
        title=SHARE_TITLE,
        text=SHARE_TEXT,
        filename=RESULT_FILENAME,
        mime_type=RESULT_MIME,
        data_url=to_data_url(RESULT_MIME, result),
    )
