from __future__ import annotations

import io

import pytest

from topn_stream.core.errors import ParseError
from topn_stream.core.records import Record
from topn_stream.ingest.source import RecordSource, open_source, parse_line


class TestParseLine:
    def test_valid_line(self):
        assert parse_line("http://api.tech.com/item/1 42\n") == Record("http://api.tech.com/item/1", 42)

    def test_tabs_and_signs(self):
        assert parse_line("HTTPS://x\t-17") == Record("HTTPS://x", -17)
        assert parse_line("http://x +3").value == 3

    def test_zero(self):
        assert parse_line("http://x 0").value == 0

    def test_missing_value(self):
        with pytest.raises(ParseError) as info:
            parse_line("http://x", line_no=7)
        assert info.value.line_no == 7
        assert "line 7" in str(info.value)

    def test_key_must_look_like_url(self):
        with pytest.raises(ParseError):
            parse_line("not-a-url 5")
        assert parse_line("plainkey 5", require_url=False) == Record("plainkey", 5)

    @pytest.mark.parametrize("raw", ["abc", "1.5", "1_000", "0x10", "12abc"])
    def test_non_integer_value(self, raw):
        with pytest.raises(ParseError):
            parse_line(f"http://x {raw}")

    def test_int64_bounds(self):
        assert parse_line(f"http://x {2**63 - 1}").value == 2**63 - 1
        assert parse_line(f"http://x {-(2**63)}").value == -(2**63)
        with pytest.raises(ParseError):
            parse_line(f"http://x {2**63}")

    def test_extra_columns_are_tolerated(self):
        assert parse_line("http://x 5 trailing junk") == Record("http://x", 5)


class TestRecordSource:
    def test_skips_blank_lines_and_counts(self):
        src = RecordSource(["http://a 1\n", "\n", "   \n", "http://b 2\n"])
        assert [r.value for r in src] == [1, 2]
        assert src.lines_read == 4
        assert src.records_read == 2
        assert src.blank_lines == 2

    def test_parse_error_stops_stream(self):
        src = RecordSource(["http://a 1", "http://b x", "http://c 3"])
        it = iter(src)
        assert next(it).value == 1
        with pytest.raises(ParseError) as info:
            next(it)
        assert info.value.line_no == 2
        assert src.records_read == 1

    def test_single_pass(self):
        src = RecordSource(["http://a 1"])
        list(src)
        with pytest.raises(RuntimeError):
            iter(src)

    def test_invalid_utf8_is_a_parse_error_on_its_line(self):
        src = RecordSource([b"http://a 1\n", b"http://\xff\xfe 2\n", b"http://c 3\n"])
        it = iter(src)
        assert next(it).value == 1
        with pytest.raises(ParseError) as info:
            next(it)
        assert info.value.line_no == 2
        assert "invalid UTF-8" in str(info.value)

    def test_decode_error_from_text_stream(self):
        def lines():
            yield "http://a 1\n"
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        it = iter(RecordSource(lines()))
        next(it)
        with pytest.raises(ParseError) as info:
            next(it)
        assert info.value.line_no == 2

    def test_lazy(self):
        consumed = []

        def lines():
            for i in range(3):
                consumed.append(i)
                yield f"http://x/{i} {i}"

        it = iter(RecordSource(lines()))
        next(it)
        assert consumed == [0]


def test_open_source_reads_file(input_file):
    with open_source(input_file) as src:
        records = list(src)
    assert [r.value for r in records] == [5, 9, 1, 7]


def test_open_source_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("http://a 3\nhttp://b 4\n"))
    with open_source("-") as src:
        assert [r.value for r in src] == [3, 4]


def test_open_source_missing_file(tmp_path):
    with pytest.raises(OSError):
        with open_source(tmp_path / "nope.txt"):
            pass


def test_open_source_reports_bad_bytes_with_line_number(tmp_path):
    p = tmp_path / "bad.txt"
    p.write_bytes(b"http://a 1\nhttp://\xff\xfe 2\n")
    with open_source(p) as src:
        it = iter(src)
        assert next(it).value == 1
        with pytest.raises(ParseError) as info:
            next(it)
    assert info.value.line_no == 2
