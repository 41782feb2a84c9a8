"""Manuscript export: plain text, DOCX, PDF and EPUB"""
import html
import io
import re
from dataclasses import dataclass
from typing import List, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt
from ebooklib import epub

from bookgen.config import settings as app_settings
from bookgen.exceptions import (
    NotFoundError,
    ValidationFailedError,
    InvalidStateError,
    UnsupportedFormatError,
    ExportFailedError,
)
from bookgen.logger import get_logger
from bookgen.models import Book, BookStatus, Chapter
from bookgen.services.record_store import RecordStore

logger = get_logger(__name__)

SUPPORTED_FORMATS = ("txt", "docx", "pdf", "epub")

MIME_TYPES = {
    "txt": "text/plain",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pdf": "application/pdf",
    "epub": "application/epub+zip",
}

# Named page sizes → renderer paper formats (kindle approximated by A5)
PAGE_FORMATS = {
    "letter": "Letter",
    "a4": "A4",
    "kindle": "A5",
}


@dataclass
class ExportOptions:
    format: str = "docx"
    page_size: str = "letter"
    include_toc: bool = True
    include_metadata: bool = True
    kdp_formatting: bool = False


@dataclass
class ExportResult:
    filename: str
    content: bytes
    mime_type: str


def split_paragraphs(content: Optional[str]) -> List[str]:
    """Non-blank lines, stripped, in original order."""
    if not content:
        return []
    return [line.strip() for line in content.split("\n") if line.strip()]


def sanitize_filename(title: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", title).lower()[:100]


def chapter_heading(chapter: Chapter) -> str:
    return f"Chapter {chapter.chapter_number}: {chapter.title}"


class PdfRenderer:
    """Renders HTML to PDF bytes with headless Chromium via Playwright."""

    def __init__(self, timeout_ms: Optional[int] = None):
        self.timeout_ms = timeout_ms or app_settings.pdf_render_timeout_ms

    async def render(self, html_content: str, page_format: str) -> bytes:
        from playwright.async_api import async_playwright

        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=True,
                args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
            )
            try:
                page = await browser.new_page()
                page.set_default_timeout(self.timeout_ms)
                await page.set_content(html_content, wait_until="networkidle")
                return await page.pdf(
                    format=page_format,
                    print_background=True,
                    margin={"top": "1in", "bottom": "1in", "left": "1in", "right": "1in"},
                    display_header_footer=True,
                    header_template="<div></div>",
                    footer_template=(
                        '<div style="font-size: 10px; text-align: center; width: 100%;">'
                        '<span class="pageNumber"></span></div>'
                    ),
                )
            finally:
                await browser.close()


KDP_STYLES = """
body { font-family: 'Times New Roman', serif; font-size: 12pt; line-height: 1.6; text-align: justify; margin: 0; padding: 0; }
h1 { font-size: 18pt; font-weight: bold; text-align: center; page-break-before: always; margin-top: 2em; margin-bottom: 1em; }
p { margin-bottom: 1em; text-indent: 0.5in; orphans: 2; widows: 2; }
.title-page { page-break-after: always; text-align: center; margin-top: 3in; }
.title { font-size: 24pt; font-weight: bold; margin-bottom: 2em; }
.toc { page-break-after: always; }
.chapter { page-break-before: always; }
"""

SIMPLE_STYLES = """
body { font-family: Georgia, serif; font-size: 12pt; line-height: 1.6; max-width: 6.5in; margin: 0 auto; }
h1 { font-size: 18pt; margin-top: 2em; margin-bottom: 1em; }
p { margin-bottom: 1em; }
.title { font-size: 24pt; font-weight: bold; margin-bottom: 2em; }
.chapter { page-break-before: always; }
"""


class ManuscriptExporter:
    """Renders a completed book into one of the supported formats"""

    def __init__(self, store: RecordStore, pdf_renderer: Optional[PdfRenderer] = None):
        self.store = store
        self.pdf_renderer = pdf_renderer or PdfRenderer()

    async def export_book(self, owner_id: str, book_id: str, options: ExportOptions) -> ExportResult:
        fmt = (options.format or "").lower()
        if fmt not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(options.format, list(SUPPORTED_FORMATS))

        book = await self.store.get_book(book_id, owner_id)
        if not book:
            raise NotFoundError("Book", book_id)
        if book.status != BookStatus.COMPLETED:
            raise InvalidStateError(
                "Book must be completed before export",
                {"book_id": book_id, "status": book.status},
            )

        chapters = await self.store.list_chapters(book_id)
        if not chapters:
            raise NotFoundError("Chapter", message=f"No chapters found for book {book_id}")
        chapters = sorted(chapters, key=lambda c: c.chapter_number)

        renderers = {
            "txt": self.export_txt,
            "docx": self.export_docx,
            "pdf": self.export_pdf,
            "epub": self.export_epub,
        }
        content = await renderers[fmt](book, chapters, options)

        result = ExportResult(
            filename=f"{sanitize_filename(book.title)}.{fmt}",
            content=content,
            mime_type=MIME_TYPES[fmt],
        )
        logger.info(f"📦 Exported book {book_id} as {fmt}: {len(content)} bytes")
        return result

    # ---- plain text ----

    async def export_txt(self, book: Book, chapters: List[Chapter], options: ExportOptions) -> bytes:
        parts = [f"{book.title}\n", "=" * len(book.title) + "\n\n"]

        if options.include_metadata:
            parts.append(f"Genre: {book.genre}\n")
            parts.append(f"Target Audience: {book.target_audience or 'General'}\n")
            parts.append(f"Word Count: {book.current_word_count} words\n\n")

        if options.include_toc:
            parts.append("TABLE OF CONTENTS\n")
            parts.append("-" * 17 + "\n\n")
            for chapter in chapters:
                parts.append(chapter_heading(chapter) + "\n")
            parts.append("\n\n")

        for index, chapter in enumerate(chapters):
            if index > 0:
                parts.append("\n\n")
            heading = chapter_heading(chapter)
            parts.append(heading + "\n")
            parts.append("-" * len(heading) + "\n\n")
            parts.append(chapter.content or "")
            parts.append("\n")

        return "".join(parts).encode("utf-8")

    # ---- DOCX ----

    async def export_docx(self, book: Book, chapters: List[Chapter], options: ExportOptions) -> bytes:
        try:
            doc = Document()

            title = doc.add_paragraph()
            title.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = title.add_run(book.title)
            run.bold = True
            run.font.size = Pt(24)

            if options.include_metadata:
                for line in (
                    f"Genre: {book.genre}",
                    f"Target Audience: {book.target_audience or 'General'}",
                    f"Word Count: {book.current_word_count} words",
                ):
                    para = doc.add_paragraph()
                    para.alignment = WD_ALIGN_PARAGRAPH.CENTER
                    para.add_run(line).font.size = Pt(12)

            if options.include_toc:
                doc.add_heading("Table of Contents", level=1)
                for chapter in chapters:
                    doc.add_paragraph(chapter_heading(chapter))

            for chapter in chapters:
                doc.add_heading(chapter_heading(chapter), level=1)
                for text in split_paragraphs(chapter.content):
                    doc.add_paragraph(text).runs[0].font.size = Pt(12)

            buffer = io.BytesIO()
            doc.save(buffer)
            return buffer.getvalue()
        except Exception as e:
            logger.error(f"❌ DOCX export failed for book {book.id}: {e}", exc_info=True)
            raise ExportFailedError(f"DOCX export failed: {e}") from e

    # ---- PDF ----

    def build_html(self, book: Book, chapters: List[Chapter], options: ExportOptions) -> str:
        """Printable HTML: title page, optional metadata and TOC, one section per chapter."""
        esc = html.escape
        styles = KDP_STYLES if options.kdp_formatting else SIMPLE_STYLES

        body = ['<div class="title-page">', f'<div class="title">{esc(book.title)}</div>']
        if options.include_metadata:
            body.append(f"<p>Genre: {esc(book.genre)}</p>")
            body.append(f"<p>Target Audience: {esc(book.target_audience or 'General')}</p>")
            body.append(f"<p>Word Count: {book.current_word_count} words</p>")
        body.append("</div>")

        if options.include_toc:
            body.append('<div class="toc">')
            body.append("<h1>Table of Contents</h1>")
            body.extend(f"<p>{esc(chapter_heading(c))}</p>" for c in chapters)
            body.append("</div>")

        for chapter in chapters:
            body.append('<div class="chapter">')
            body.append(f"<h1>{esc(chapter_heading(chapter))}</h1>")
            body.extend(f"<p>{esc(text)}</p>" for text in split_paragraphs(chapter.content))
            body.append("</div>")

        return (
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"UTF-8\">\n"
            f"<title>{esc(book.title)}</title>\n<style>{styles}</style>\n</head>\n<body>\n"
            + "\n".join(body)
            + "\n</body>\n</html>\n"
        )

    async def export_pdf(self, book: Book, chapters: List[Chapter], options: ExportOptions) -> bytes:
        page_format = PAGE_FORMATS.get(options.page_size)
        if page_format is None:
            raise ValidationFailedError(
                f"Unsupported page size: {options.page_size}",
                {"page_size": options.page_size, "supported": list(PAGE_FORMATS)},
            )
        html_content = self.build_html(book, chapters, options)
        try:
            return await self.pdf_renderer.render(html_content, page_format)
        except Exception as e:
            logger.error(f"❌ PDF rendering failed for book {book.id}: {e}", exc_info=True)
            raise ExportFailedError(f"PDF rendering failed: {e}") from e

    # ---- EPUB ----

    def _chapter_item(self, chapter: Chapter) -> epub.EpubHtml:
        heading = chapter_heading(chapter)
        paragraphs = [f"<p>{html.escape(text)}</p>" for text in split_paragraphs(chapter.content)]
        # ebooklib requires a non-empty body
        if not paragraphs:
            paragraphs.append("<p>&#160;</p>")

        item = epub.EpubHtml(
            uid=f"ch{chapter.chapter_number}",
            title=heading,
            file_name=f"chapter{chapter.chapter_number}.xhtml",
            lang="en",
        )
        item.content = (
            f"<html><head><title>{html.escape(chapter.title)}</title></head><body>"
            f"<h1>{html.escape(heading)}</h1>\n" + "\n".join(paragraphs) + "</body></html>"
        ).encode("utf-8")
        return item

    async def export_epub(self, book: Book, chapters: List[Chapter], options: ExportOptions) -> bytes:
        try:
            package = epub.EpubBook()
            package.set_identifier(book.id)
            package.set_title(book.title)
            package.set_language("en")
            package.add_author("BookGen AI")
            package.add_metadata("DC", "subject", book.genre)
            if options.include_metadata and book.description:
                package.add_metadata("DC", "description", book.description)

            items = [self._chapter_item(chapter) for chapter in chapters]
            for item in items:
                package.add_item(item)

            package.toc = items
            package.add_item(epub.EpubNcx())
            package.add_item(epub.EpubNav())
            package.spine = items

            buffer = io.BytesIO()
            epub.write_epub(buffer, package, {})
            return buffer.getvalue()
        except Exception as e:
            logger.error(f"❌ EPUB export failed for book {book.id}: {e}", exc_info=True)
            raise ExportFailedError(f"EPUB export failed: {e}") from e
