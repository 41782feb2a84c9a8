"""Tests for the error taxonomy."""

from bookgen.exceptions import (
    BookGenError,
    NotFoundError,
    ValidationFailedError,
    UnsupportedFormatError,
    InvalidStateError,
    AuthError,
    UpstreamError,
    ParseError,
    ExportFailedError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_base(self):
        for cls in (NotFoundError, ValidationFailedError, UnsupportedFormatError, InvalidStateError,
                    AuthError, UpstreamError, ParseError, ExportFailedError):
            assert issubclass(cls, BookGenError), f"{cls.__name__} must inherit BookGenError"

    def test_subclasses(self):
        assert issubclass(UnsupportedFormatError, ValidationFailedError)
        assert issubclass(ParseError, UpstreamError)


class TestStatusCodes:
    def test_http_mapping(self):
        assert NotFoundError("Book").status_code == 404
        assert ValidationFailedError("bad").status_code == 400
        assert UnsupportedFormatError("mobi").status_code == 400
        assert InvalidStateError("not yet").status_code == 409
        assert AuthError("no key").status_code == 400
        assert UpstreamError("down").status_code == 502
        assert ParseError().status_code == 502
        assert ExportFailedError("broken").status_code == 500


class TestMessages:
    def test_not_found_details(self):
        err = NotFoundError("Chapter", "abc")
        assert err.message == "Chapter not found"
        assert err.details == {"entity": "Chapter", "id": "abc"}
        assert str(err) == "Chapter not found (entity=Chapter, id=abc)"

    def test_unsupported_format(self):
        err = UnsupportedFormatError("mobi", ["txt", "docx"])
        assert err.format == "mobi"
        assert "mobi" in err.message
        assert err.details["supported"] == "txt, docx"

    def test_upstream_status(self):
        err = UpstreamError("OpenRouter API error (503)", status=503)
        assert err.status == 503
        assert err.details == {"status": 503}

    def test_parse_error_keeps_raw_response(self):
        err = ParseError(raw_response="x" * 500)
        assert err.raw_response == "x" * 500
        assert len(err.details["raw_response"]) == 200
