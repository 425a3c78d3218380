"""
BabyJournal Backend — Media File Route
=======================================

Serves uploaded photos, videos and thumbnails from public_root/media.
Stored files never change (new uploads get new names), so responses are
cacheable. Access is by unguessable URL, as with the stored file_url values.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from babyjournal.exceptions import NotFoundError
from babyjournal.services.file_service import file_service

router = APIRouter(tags=["Media"])


@router.get("/media/{file_path:path}", include_in_schema=False)
async def serve_media(file_path: str) -> FileResponse:
    path = file_service.resolve_media_path(file_path)
    if not path.is_file():
        raise NotFoundError("file")
    return FileResponse(path, headers={"Cache-Control": "private, max-age=86400"})
