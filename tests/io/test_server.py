from __future__ import annotations

import asyncio
import io
import json
from typing import Any

import pytest

from mcodec.io.config import ServiceSettings
from mcodec.io.dispatch import Dispatcher
from mcodec.io.protocol import Response
from mcodec.io.server import LineService, ServiceState

UNIT_SCHEMA = {"prim": "unit", "annots": ["%a"]}


def _line(id_: Any, content: dict[str, Any]) -> bytes:
    return (json.dumps({"id": id_, "content": content}) + "\n").encode()


def _decode_unit(id_: Any) -> bytes:
    return _line(id_, {"kind": "Decode", "schema": UNIT_SCHEMA, "michelson": {"prim": "Unit"}})


async def _serve(chunks: list[bytes], settings: ServiceSettings | None = None) -> tuple[int, list[Any], LineService]:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    reader.feed_eof()
    out = io.BytesIO()
    service = LineService(settings)
    code = await service.run(reader, out)
    lines = [json.loads(line) for line in out.getvalue().decode().splitlines()]
    return code, lines, service


@pytest.mark.asyncio
async def test_single_request_single_response_line() -> None:
    code, lines, service = await _serve([_decode_unit(1)])
    assert code == 0
    assert lines == [{"id": 1, "content": {"status": "Success", "value": {"__unit__": None}}}]
    assert service.state is ServiceState.TERMINATED


@pytest.mark.asyncio
async def test_requests_split_across_chunks_answer_in_order() -> None:
    payload = _decode_unit(1) + _line(2, {"kind": "Encode", "schema": UNIT_SCHEMA, "data": {"__unit__": None}})
    chunks = [payload[i : i + 7] for i in range(0, len(payload), 7)]
    code, lines, _ = await _serve(chunks)
    assert code == 0
    assert [l["id"] for l in lines] == [1, 2]
    assert lines[1]["content"] == {"status": "Success", "value": {"prim": "Unit"}}


@pytest.mark.asyncio
async def test_request_failure_keeps_serving() -> None:
    bad = _line(1, {"kind": "Decode", "schema": {"prim": "int"}, "michelson": {"prim": "Unit"}})
    code, lines, _ = await _serve([bad, _decode_unit(2)])
    assert code == 0
    assert lines[0]["id"] == 1
    assert lines[0]["content"]["status"] == "Error"
    assert lines[1]["content"]["status"] == "Success"


@pytest.mark.asyncio
async def test_malformed_json_terminates_without_response() -> None:
    code, lines, service = await _serve([_decode_unit(1), b"{not json}\n", _decode_unit(2)])
    assert code == 1
    assert [l["id"] for l in lines] == [1]
    assert service.state is ServiceState.TERMINATED


@pytest.mark.asyncio
async def test_unknown_kind_terminates() -> None:
    code, lines, _ = await _serve([_line(1, {"kind": "Nope"}), _decode_unit(2)])
    assert code == 1
    assert lines == []


@pytest.mark.asyncio
async def test_partial_message_at_eof_is_fatal() -> None:
    code, lines, _ = await _serve([_decode_unit(1), b'{"id": 2'])
    assert code == 1
    assert len(lines) == 1


@pytest.mark.asyncio
async def test_output_failure_is_fatal() -> None:
    class BrokenSink(io.BytesIO):
        def write(self, b: Any) -> int:
            raise BrokenPipeError("gone")

    reader = asyncio.StreamReader()
    reader.feed_data(_decode_unit(1))
    reader.feed_eof()
    assert await LineService().run(reader, BrokenSink()) == 1


@pytest.mark.asyncio
async def test_concurrent_mode_answers_every_request() -> None:
    settings = ServiceSettings(dispatch_mode="concurrent")
    code, lines, _ = await _serve([b"".join(_decode_unit(i) for i in range(10))], settings)
    assert code == 0
    assert sorted(l["id"] for l in lines) == list(range(10))


@pytest.mark.asyncio
async def test_concurrent_mode_completion_order() -> None:
    class SlowFirst(Dispatcher):
        async def handle(self, message: Any) -> Response:
            if message["id"] == "slow":
                await asyncio.sleep(0.05)
            return await super().handle(message)

    reader = asyncio.StreamReader()
    reader.feed_data(_decode_unit("slow") + _decode_unit("fast"))
    reader.feed_eof()
    out = io.BytesIO()
    service = LineService(ServiceSettings(dispatch_mode="concurrent"), SlowFirst())
    assert await service.run(reader, out) == 0
    ids = [json.loads(l)["id"] for l in out.getvalue().decode().splitlines()]
    assert ids == ["fast", "slow"]


@pytest.mark.asyncio
async def test_concurrent_mode_fatal_error_in_task() -> None:
    settings = ServiceSettings(dispatch_mode="concurrent")
    code, _, service = await _serve([_line(1, {"kind": "Nope"})], settings)
    assert code == 1
    assert service.state is ServiceState.TERMINATED


@pytest.mark.asyncio
async def test_concurrent_mode_answers_dispatched_requests_before_malformed_line() -> None:
    settings = ServiceSettings(dispatch_mode="concurrent")
    chunk = _decode_unit(1) + b"{not json}\n" + _decode_unit(2)
    code, lines, service = await _serve([chunk], settings)
    assert code == 1
    assert [l["id"] for l in lines] == [1]
    assert lines[0]["content"]["status"] == "Success"
    assert service.state is ServiceState.TERMINATED


@pytest.mark.asyncio
async def test_concurrent_mode_fatal_task_lets_others_finish() -> None:
    class SlowFirst(Dispatcher):
        async def handle(self, message: Any) -> Response:
            if message["id"] == "slow":
                await asyncio.sleep(0.05)
            return await super().handle(message)

    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    reader.feed_data(_decode_unit("slow") + _line("bad", {"kind": "Nope"}))
    loop.call_later(0.01, reader.feed_data, _decode_unit("late"))
    loop.call_later(0.02, reader.feed_eof)
    out = io.BytesIO()
    service = LineService(ServiceSettings(dispatch_mode="concurrent"), SlowFirst())
    assert await service.run(reader, out) == 1
    ids = [json.loads(l)["id"] for l in out.getvalue().decode().splitlines()]
    assert ids == ["slow"]


@pytest.mark.asyncio
async def test_unhashable_kind_terminates_with_exit_code() -> None:
    code, lines, service = await _serve([_line(1, {"kind": ["Encode"]}), _decode_unit(2)])
    assert code == 1
    assert lines == []
    assert service.state is ServiceState.TERMINATED
