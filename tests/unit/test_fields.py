import pytest

from eventsource_parse._config import ParseOptions
from eventsource_parse._errors import EventStreamDecodeError
from eventsource_parse._fields import (
    DataPart,
    EmptyPart,
    EventPart,
    IdPart,
    RetryPart,
    aiter_field_parts,
    is_data_part,
    is_empty_part,
    is_event_part,
    is_id_part,
    is_retry_part,
    iter_field_parts,
    parse_field_part,
    parse_retry,
)
from eventsource_parse._lines import Line


def make_line(raw: bytes) -> Line:
    return Line(raw, raw.find(b":"))


async def agen(*chunks):
    for chunk in chunks:
        yield chunk


@pytest.fixture
def options() -> ParseOptions:
    return ParseOptions(debug=False)


def test_empty_line_is_empty_part(options):
    assert parse_field_part(make_line(b""), options=options) == EmptyPart()


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b"data: hello", DataPart("hello")),
        (b"event: add", EventPart("add")),
        (b"id: abc", IdPart("abc")),
        (b"retry: 3000", RetryPart(3000)),
    ],
)
def test_known_fields(options, raw, expected):
    assert parse_field_part(make_line(raw), options=options) == expected


def test_value_without_space(options):
    assert parse_field_part(make_line(b"data:hello"), options=options) == DataPart("hello")


def test_only_one_leading_space_is_removed(options):
    assert parse_field_part(make_line(b"data:  hello"), options=options) == DataPart(" hello")


def test_extra_colons_belong_to_value(options):
    assert parse_field_part(make_line(b"data: a:b: c"), options=options) == DataPart("a:b: c")


def test_empty_value(options):
    assert parse_field_part(make_line(b"data:"), options=options) == DataPart("")
    assert parse_field_part(make_line(b"event: "), options=options) == EventPart("")


@pytest.mark.parametrize(
    "raw",
    [
        b": this is a comment",
        b":",
        b"data",
        b"foo: bar",
        b"Data: case matters",
        b"retry: x",
        b"retry:",
    ],
)
def test_ignored_lines(options, raw):
    assert parse_field_part(make_line(raw), options=options) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3000", 3000),
        (" 42", 42),
        ("3000ms", 3000),
        ("-5", -5),
        ("+7", 7),
        ("1.5", 1),
        ("abc", None),
        ("", None),
        ("ms3000", None),
    ],
)
def test_parse_retry(value, expected):
    assert parse_retry(value) == expected


def test_decode_error_is_raised(options):
    line = make_line(b"data: \xff\xfe")

    with pytest.raises(EventStreamDecodeError) as exc:
        parse_field_part(line, options=options)

    assert exc.value.line == b"data: \xff\xfe"
    assert exc.value.encoding == "utf-8"
    assert exc.value.position == 6
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


def test_decode_with_replace_errors():
    options = ParseOptions(errors="replace", debug=False)

    part = parse_field_part(make_line(b"data: \xff"), options=options)

    assert part == DataPart("�")


def test_non_utf8_encoding():
    options = ParseOptions(encoding="latin-1", debug=False)

    part = parse_field_part(make_line("data: café".encode("latin-1")), options=options)

    assert part == DataPart("café")


def test_type_guards():
    assert is_empty_part(EmptyPart())
    assert is_data_part(DataPart("x"))
    assert is_event_part(EventPart("x"))
    assert is_id_part(IdPart("x"))
    assert is_retry_part(RetryPart(1))
    assert not is_data_part(EventPart("x"))
    assert [p.type for p in (EmptyPart(), DataPart(""), EventPart(""), IdPart(""), RetryPart(0))] == [
        "empty",
        "data",
        "event",
        "id",
        "retry",
    ]


def test_reader_skips_ignored_lines(options):
    source = [b": ping\nfoo: bar\nretry: x\nretry: 10\nda", b"ta: y\n\n"]

    parts = list(iter_field_parts(source, options=options))

    assert parts == [RetryPart(10), DataPart("y"), EmptyPart()]


def test_reader_stops_after_decode_error(options):
    reader = iter_field_parts([b"data: ok\ndata: \xff\ndata: later\n"], options=options)

    assert next(reader) == DataPart("ok")
    with pytest.raises(EventStreamDecodeError):
        next(reader)
    # El error es terminal: no se siguen produciendo partes.
    assert list(reader) == []


def test_reader_debug_logging(caplog):
    options = ParseOptions(debug=True)

    list(iter_field_parts([b": ping\nnope\ndata: x\n"], options=options))

    assert "SSE SKIP reason=comment" in caplog.text
    assert "SSE SKIP reason=no separator" in caplog.text
    assert "SSE PART type=data" in caplog.text


def test_reader_silent_without_debug(options, caplog):
    list(iter_field_parts([b": ping\ndata: x\n"], options=options))

    assert "SSE" not in caplog.text


@pytest.mark.asyncio
async def test_async_reader(options):
    reader = aiter_field_parts(agen(b"event: a", b"dd\r\nid:", b" 1\r\n\r\n"), options=options)

    parts = [part async for part in reader]

    assert parts == [EventPart("add"), IdPart("1"), EmptyPart()]


@pytest.mark.asyncio
async def test_async_reader_stops_after_decode_error(options):
    reader = aiter_field_parts(agen(b"id: \xc3\n", b"data: x\n"), options=options)

    with pytest.raises(EventStreamDecodeError):
        await reader.__anext__()
    assert [part async for part in reader] == []


def test_parse_without_options_reuses_defaults(monkeypatch):
    # Sin options no debe construirse un ParseOptions nuevo por cada línea.
    def fail(*args, **kwargs):
        raise AssertionError("ParseOptions rebuilt")

    monkeypatch.setattr("eventsource_parse._fields.ParseOptions", fail)

    assert parse_field_part(make_line(b"data: x")) == DataPart("x")
    assert parse_field_part(make_line(b"retry: 5")) == RetryPart(5)


def test_sync_reader_close_closes_upstream(options):
    closed = False

    def source():
        nonlocal closed
        try:
            yield b"data: a\n"
            yield b"data: b\n"
        finally:
            closed = True

    reader = iter_field_parts(source(), options=options)
    assert next(reader) == DataPart("a")
    reader.close()

    assert closed
    assert list(reader) == []
