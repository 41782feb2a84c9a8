"""Book API"""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from bookgen.database import get_db
from bookgen.logger import get_logger
from bookgen.schemas.book import BookCreate, BookUpdate, BookResponse, BookStatsResponse
from bookgen.schemas.chapter import ChapterCreate, ChapterResponse
from bookgen.schemas.export import ExportRequest
from bookgen.schemas.outline import OutlineCreate, OutlineResponse
from bookgen.services.export_service import ManuscriptExporter, ExportOptions, PdfRenderer
from bookgen.services.lifecycle import LifecycleEngine
from bookgen.services.record_store import RecordStore
from bookgen.api.users import get_current_user_id

router = APIRouter(prefix="/books", tags=["Books"])
logger = get_logger(__name__)


def get_pdf_renderer() -> PdfRenderer:
    return PdfRenderer()


@router.get("", response_model=List[BookResponse], summary="List books")
async def list_books(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """The user's books, most recently updated first"""
    return await RecordStore(db).list_books(user_id)


@router.post("", response_model=BookResponse, status_code=201, summary="Create book")
async def create_book(
    data: BookCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).create_book(user_id, data)


@router.get("/stats", response_model=BookStatsResponse, summary="Dashboard statistics")
async def book_stats(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).book_stats(user_id)


@router.get("/{book_id}", response_model=BookResponse, summary="Get book")
async def get_book(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).get_book(user_id, book_id)


@router.put("/{book_id}", response_model=BookResponse, summary="Update book details")
async def update_book(
    book_id: str,
    data: BookUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Edit details; status and word counts are derived and cannot be set"""
    return await LifecycleEngine(RecordStore(db)).update_book_details(user_id, book_id, data)


@router.delete("/{book_id}", summary="Delete book")
async def delete_book(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete a book together with its outline and chapters"""
    await LifecycleEngine(RecordStore(db)).delete_book(user_id, book_id)
    return {"message": "Book deleted"}


@router.get("/{book_id}/outline", response_model=OutlineResponse, summary="Get book outline")
async def get_book_outline(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).get_book_outline(user_id, book_id)


@router.post("/{book_id}/outline", response_model=OutlineResponse, status_code=201, summary="Create outline")
async def create_book_outline(
    book_id: str,
    data: OutlineCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).create_outline(user_id, book_id, data)


@router.get("/{book_id}/chapters", response_model=List[ChapterResponse], summary="List chapters")
async def list_book_chapters(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Chapters in manuscript order"""
    return await LifecycleEngine(RecordStore(db)).list_chapters(user_id, book_id)


@router.post("/{book_id}/chapters", response_model=ChapterResponse, status_code=201, summary="Create chapter")
async def create_book_chapter(
    book_id: str,
    data: ChapterCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).create_chapter(user_id, book_id, data)


@router.post("/{book_id}/export", summary="Export manuscript")
async def export_book(
    book_id: str,
    data: ExportRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    pdf_renderer: PdfRenderer = Depends(get_pdf_renderer)
):
    """
    Export a completed book as txt, docx, pdf or epub.

    Options missing from the request come from the user's export preferences.
    """
    store = RecordStore(db)
    prefs = await store.get_or_create_settings(user_id)
    await store.commit()

    options = ExportOptions(
        format=data.format or prefs.export_format,
        page_size=data.page_size or prefs.export_page_size,
        include_toc=prefs.export_include_toc if data.include_toc is None else data.include_toc,
        include_metadata=prefs.export_include_metadata if data.include_metadata is None else data.include_metadata,
        kdp_formatting=prefs.export_kdp_formatting if data.kdp_formatting is None else data.kdp_formatting,
    )
    result = await ManuscriptExporter(store, pdf_renderer).export_book(user_id, book_id, options)
    return Response(
        content=result.content,
        media_type=result.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
