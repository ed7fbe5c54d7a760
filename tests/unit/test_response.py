"""
Unit tests for HTTP response building.
"""

import pytest

from tinyhttp.http import HTTPStatus, Response, content_response, error_response


class TestResponse:
    """Tests for Response class."""

    def test_status_line(self):
        """Test status line generation."""
        assert Response(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert Response(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"
        assert (Response(status=HTTPStatus.INTERNAL_SERVER_ERROR).status_line
                == "HTTP/1.1 500 Internal Server Error")

    def test_to_bytes_keeps_header_order(self):
        """Headers go on the wire in the order they were given."""
        response = Response(headers=[("B", "2"), ("A", "1")], body=b"x")

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nB: 2\r\nA: 1\r\n\r\nx"

    def test_to_bytes_adds_nothing(self):
        """No Date, Server or Content-Length is invented."""
        response = Response(body=b"abc")

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\nabc"

    def test_header_lookup_is_case_insensitive(self):
        response = Response(headers=[("Content-Length", "3")])

        assert response.header("content-length") == "3"
        assert response.header("Content-Type") is None


class TestContentResponse:
    """Tests for the 200 response builder."""

    def test_hello_bytes(self):
        """The exact wire bytes for a 15-byte page."""
        response = content_response(b"<html>Hi</html>")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\nContent-Length: 15\r\n\r\n<html>Hi</html>"
        )

    def test_single_header(self):
        response = content_response(b"abc")

        assert response.headers == [("Content-Length", "3")]

    def test_length_counts_bytes_not_characters(self):
        """Multi-byte UTF-8 content is measured in bytes."""
        body = "héllo wörld ✓".encode("utf-8")
        response = content_response(body)

        assert int(response.header("Content-Length")) == len(body)
        assert response.to_bytes().endswith(body)

    def test_body_is_verbatim(self):
        """Binary content, including CRLFs and NULs, is untouched."""
        body = bytes(range(256)) + b"\r\n\r\n"
        raw = content_response(body).to_bytes()

        head, _, rest = raw.partition(b"\r\n\r\n")
        assert rest == body
        assert head.endswith(b"Content-Length: 260")

    def test_empty_body(self):
        raw = content_response(b"").to_bytes()

        assert raw == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"


class TestErrorResponse:
    """Tests for failure responses."""

    @pytest.mark.parametrize("status, line", [
        (HTTPStatus.NOT_FOUND, b"HTTP/1.1 404 Not Found"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, b"HTTP/1.1 500 Internal Server Error"),
    ])
    def test_error_bytes(self, status, line):
        """Error responses carry no body and say so."""
        assert error_response(status).to_bytes() == line + b"\r\nContent-Length: 0\r\n\r\n"

    def test_accepts_plain_int(self):
        assert error_response(404).status is HTTPStatus.NOT_FOUND


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"

    def test_categories(self):
        assert HTTPStatus.OK.is_success
        assert not HTTPStatus.OK.is_error
        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
