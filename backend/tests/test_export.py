"""Tests for the manuscript exporter."""

import io
import zipfile
import pytest

from docx import Document

from bookgen.exceptions import (
    NotFoundError,
    ValidationFailedError,
    InvalidStateError,
    UnsupportedFormatError,
    ExportFailedError,
)
from bookgen.schemas.book import BookCreate
from bookgen.schemas.chapter import ChapterCreate
from bookgen.services.export_service import (
    ManuscriptExporter,
    ExportOptions,
    split_paragraphs,
    sanitize_filename,
)

CHAPTER_ONE = "Focus beats hustle & noise.\n\n   \nShip <small> things daily.\n"
CHAPTER_TWO = "Plan the day before it starts.\nProtect the morning."


class FailingRenderer:
    async def render(self, html_content: str, page_format: str) -> bytes:
        raise RuntimeError("chromium failed to launch")


@pytest.fixture
async def completed_book(lifecycle, owner, outline_data):
    """A completed book whose chapters were created out of order."""
    book = await lifecycle.create_book(owner, BookCreate(
        title="Deep Work: A Founder's Guide",
        genre="Business",
        target_word_count=10,
        target_audience="Founders",
    ))
    await lifecycle.create_outline(owner, book.id, outline_data)
    await lifecycle.approve_outline(owner, (await lifecycle.get_book_outline(owner, book.id)).id)
    second = await lifecycle.create_chapter(owner, book.id, ChapterCreate(chapter_number=2, title="Designing Your Day"))
    first = await lifecycle.create_chapter(owner, book.id, ChapterCreate(chapter_number=1, title="Why Focus Wins"))
    await lifecycle.write_chapter_content(owner, second.id, CHAPTER_TWO)
    await lifecycle.write_chapter_content(owner, first.id, CHAPTER_ONE)
    return await lifecycle.get_book(owner, book.id)


@pytest.fixture
def exporter(store, pdf_renderer):
    return ManuscriptExporter(store, pdf_renderer)


class TestHelpers:
    def test_split_paragraphs_drops_blank_lines(self):
        assert split_paragraphs(CHAPTER_ONE) == ["Focus beats hustle & noise.", "Ship <small> things daily."]
        assert split_paragraphs(None) == []

    def test_sanitize_filename(self):
        assert sanitize_filename("Deep Work: A Founder's Guide") == "deep_work__a_founder_s_guide"
        assert len(sanitize_filename("x" * 300)) == 100


class TestPreconditions:
    @pytest.mark.asyncio
    async def test_unsupported_format(self, exporter, owner, completed_book):
        with pytest.raises(UnsupportedFormatError):
            await exporter.export_book(owner, completed_book.id, ExportOptions(format="mobi"))

    @pytest.mark.asyncio
    async def test_book_must_be_completed(self, exporter, owner, sample_book):
        with pytest.raises(InvalidStateError):
            await exporter.export_book(owner, sample_book.id, ExportOptions(format="txt"))

    @pytest.mark.asyncio
    async def test_missing_book(self, exporter, owner):
        with pytest.raises(NotFoundError):
            await exporter.export_book(owner, "missing", ExportOptions(format="txt"))

    @pytest.mark.asyncio
    async def test_completed_book_without_chapters(self, exporter, store, owner, sample_book):
        await store.update_book(sample_book, status="completed")
        await store.commit()
        with pytest.raises(NotFoundError):
            await exporter.export_book(owner, sample_book.id, ExportOptions(format="txt"))


class TestTextExport:
    @pytest.mark.asyncio
    async def test_contains_headings_and_body_in_order(self, exporter, owner, completed_book):
        result = await exporter.export_book(owner, completed_book.id, ExportOptions(format="txt"))
        text = result.content.decode("utf-8")

        assert result.filename == "deep_work__a_founder_s_guide.txt"
        assert result.mime_type == "text/plain"
        assert text.startswith("Deep Work: A Founder's Guide\n" + "=" * 28 + "\n")
        assert "Genre: Business" in text
        assert "TABLE OF CONTENTS" in text

        heading = "Chapter 1: Why Focus Wins"
        assert f"\n{heading}\n{'-' * len(heading)}\n\n{CHAPTER_ONE}" in text
        assert text.rindex("Chapter 1: Why Focus Wins") < text.rindex("Chapter 2: Designing Your Day")

    @pytest.mark.asyncio
    async def test_without_front_matter(self, exporter, owner, completed_book):
        options = ExportOptions(format="txt", include_toc=False, include_metadata=False)
        text = (await exporter.export_book(owner, completed_book.id, options)).content.decode("utf-8")
        assert "TABLE OF CONTENTS" not in text
        assert "Genre:" not in text

    @pytest.mark.asyncio
    async def test_idempotent(self, exporter, owner, completed_book):
        options = ExportOptions(format="txt")
        first = await exporter.export_book(owner, completed_book.id, options)
        second = await exporter.export_book(owner, completed_book.id, options)
        assert first.content == second.content


class TestDocxExport:
    @pytest.mark.asyncio
    async def test_structure(self, exporter, owner, completed_book):
        result = await exporter.export_book(owner, completed_book.id, ExportOptions(format="docx"))
        assert result.filename.endswith(".docx")

        doc = Document(io.BytesIO(result.content))
        texts = [p.text for p in doc.paragraphs]
        assert texts[0] == "Deep Work: A Founder's Guide"
        assert "Table of Contents" in texts

        heading_index = len(texts) - 1 - texts[::-1].index("Chapter 1: Why Focus Wins")
        assert texts[heading_index + 1:heading_index + 3] == [
            "Focus beats hustle & noise.",
            "Ship <small> things daily.",
        ]
        assert texts[-3:] == [
            "Chapter 2: Designing Your Day",
            "Plan the day before it starts.",
            "Protect the morning.",
        ]


class TestPdfExport:
    @pytest.mark.asyncio
    async def test_renders_escaped_html(self, exporter, pdf_renderer, owner, completed_book):
        result = await exporter.export_book(
            owner, completed_book.id, ExportOptions(format="pdf", page_size="kindle", kdp_formatting=True)
        )
        assert result.content == b"%PDF-1.4 stub"
        assert result.mime_type == "application/pdf"

        html_content, page_format = pdf_renderer.calls[0]
        assert page_format == "A5"
        assert "<p>Ship &lt;small&gt; things daily.</p>" in html_content
        assert "text-indent: 0.5in" in html_content
        assert html_content.index("Chapter 1: Why Focus Wins") < html_content.index("Chapter 2: Designing Your Day")

    @pytest.mark.asyncio
    async def test_page_sizes(self, exporter, pdf_renderer, owner, completed_book):
        for page_size, expected in (("letter", "Letter"), ("a4", "A4")):
            await exporter.export_book(owner, completed_book.id, ExportOptions(format="pdf", page_size=page_size))
            assert pdf_renderer.calls[-1][1] == expected

    @pytest.mark.asyncio
    async def test_unknown_page_size(self, exporter, pdf_renderer, owner, completed_book):
        with pytest.raises(ValidationFailedError):
            await exporter.export_book(owner, completed_book.id, ExportOptions(format="pdf", page_size="tabloid"))
        assert pdf_renderer.calls == []

    @pytest.mark.asyncio
    async def test_renderer_failure(self, store, owner, completed_book):
        exporter = ManuscriptExporter(store, FailingRenderer())
        with pytest.raises(ExportFailedError):
            await exporter.export_book(owner, completed_book.id, ExportOptions(format="pdf"))


class TestEpubExport:
    @staticmethod
    def entry(zf, suffix):
        return next(name for name in zf.namelist() if name.endswith(suffix))

    @pytest.mark.asyncio
    async def test_container_layout(self, exporter, owner, completed_book):
        result = await exporter.export_book(owner, completed_book.id, ExportOptions(format="epub"))
        assert result.mime_type == "application/epub+zip"
        assert result.filename == "deep_work__a_founder_s_guide.epub"

        with zipfile.ZipFile(io.BytesIO(result.content)) as zf:
            names = zf.namelist()
            assert names[0] == "mimetype"
            assert zf.getinfo("mimetype").compress_type == zipfile.ZIP_STORED
            assert zf.read("mimetype") == b"application/epub+zip"
            assert "META-INF/container.xml" in names
            self.entry(zf, "toc.ncx")

            opf = zf.read(self.entry(zf, "content.opf")).decode("utf-8")
            assert "Deep Work: A Founder's Guide</dc:title>" in opf
            assert "Business</dc:subject>" in opf
            assert opf.index('idref="ch1"') < opf.index('idref="ch2"')

            chapter = zf.read(self.entry(zf, "chapter1.xhtml")).decode("utf-8")
            assert "<h1>Chapter 1: Why Focus Wins</h1>" in chapter
            assert "<p>Focus beats hustle &amp; noise.</p>" in chapter
            assert "<p>Ship &lt;small&gt; things daily.</p>" in chapter
