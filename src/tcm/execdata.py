# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Execution-data file codec.

Files follow the JaCoCo ``.exec`` block layout (format version ``0x1007``):
a header block followed by session-info and execution-data blocks, all
big-endian. Appending to a file writes another header, so readers accept
repeated headers.
"""

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO

from tcm.instrumentation import (
    ExecutionData,
    ExecutionRecord,
    InstrumentationError,
    SessionInfo,
)

logger = logging.getLogger(__name__)

BLOCK_HEADER = 0x01
BLOCK_SESSIONINFO = 0x10
BLOCK_EXECUTIONDATA = 0x11
MAGIC_NUMBER = 0xC0C0
FORMAT_VERSION = 0x1007

_CHAR = struct.Struct(">H")
_LONG = struct.Struct(">q")


class ExecDataFormatError(InstrumentationError):
    """Represent malformed or unsupported execution-data content."""


def write_execution_record(
    record: ExecutionRecord, path: Path, append: bool = True
) -> None:
    """Persist an execution record.

    Args:
        record: Execution record to write.
        path: Target file path.
        append: Append to an existing file instead of truncating it.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("ab" if append else "wb") as handle:
        handle.write(encode_execution_record(record))
    logger.debug(
        f"Execution data saved (path={path} sessions={len(record.sessions)} classes={len(record.entries)})"
    )


def read_execution_record(path: Path, test_id: str) -> ExecutionRecord:
    """Load an execution record from a file.

    Args:
        path: Execution-data file path.
        test_id: Test identifier to attach to the record.

    Returns:
        Execution record with all sessions and merged execution data.

    Raises:
        OSError: If the file cannot be read.
        ExecDataFormatError: If the content is malformed.
    """
    with path.open("rb") as handle:
        return decode_execution_record(handle.read(), test_id=test_id)


def encode_execution_record(record: ExecutionRecord) -> bytes:
    """Encode a header followed by the record's sessions and execution data."""
    buffer = io.BytesIO()
    buffer.write(bytes([BLOCK_HEADER]))
    buffer.write(_CHAR.pack(MAGIC_NUMBER))
    buffer.write(_CHAR.pack(FORMAT_VERSION))
    for session in record.sessions:
        buffer.write(bytes([BLOCK_SESSIONINFO]))
        _write_utf(buffer, session.id)
        buffer.write(_LONG.pack(session.start))
        buffer.write(_LONG.pack(session.dump))
    for data in record.entries.values():
        buffer.write(bytes([BLOCK_EXECUTIONDATA]))
        buffer.write(_LONG.pack(data.id))
        _write_utf(buffer, data.name)
        _write_boolean_array(buffer, data.probes)
    return buffer.getvalue()


def decode_execution_record(payload: bytes, test_id: str) -> ExecutionRecord:
    """Decode execution-data content.

    Args:
        payload: Raw file content.
        test_id: Test identifier to attach to the record.

    Returns:
        Decoded execution record.

    Raises:
        ExecDataFormatError: If the content is malformed.
    """
    record = ExecutionRecord(test_id=test_id)
    stream = io.BytesIO(payload)
    first_block = True
    while True:
        block = stream.read(1)
        if not block:
            break
        block_type = block[0]
        if first_block and block_type != BLOCK_HEADER:
            raise ExecDataFormatError("Missing execution-data header")
        first_block = False
        if block_type == BLOCK_HEADER:
            _read_header(stream)
        elif block_type == BLOCK_SESSIONINFO:
            record.add_session(
                SessionInfo(
                    id=_read_utf(stream),
                    start=_read_long(stream),
                    dump=_read_long(stream),
                )
            )
        elif block_type == BLOCK_EXECUTIONDATA:
            record.put(
                ExecutionData(
                    id=_read_long(stream),
                    name=_read_utf(stream),
                    probes=_read_boolean_array(stream),
                )
            )
        else:
            raise ExecDataFormatError(f"Unknown block type {block_type:#04x}")
    return record


def _read_header(stream: BinaryIO) -> None:
    magic = _read_char(stream)
    if magic != MAGIC_NUMBER:
        raise ExecDataFormatError(f"Invalid magic number {magic:#06x}")
    version = _read_char(stream)
    if version != FORMAT_VERSION:
        raise ExecDataFormatError(f"Unsupported format version {version:#06x}")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunk = stream.read(size)
    if len(chunk) != size:
        raise ExecDataFormatError("Unexpected end of execution data")
    return chunk


def _read_char(stream: BinaryIO) -> int:
    return _CHAR.unpack(_read_exact(stream, _CHAR.size))[0]


def _read_long(stream: BinaryIO) -> int:
    return _LONG.unpack(_read_exact(stream, _LONG.size))[0]


def _write_utf(stream: BinaryIO, value: str) -> None:
    encoded = value.encode("utf-8")
    if len(encoded) > 0xFFFF:
        raise InstrumentationError(f"String too long for execution data: {value[:40]}")
    stream.write(_CHAR.pack(len(encoded)))
    stream.write(encoded)


def _read_utf(stream: BinaryIO) -> str:
    length = _read_char(stream)
    raw = _read_exact(stream, length)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ExecDataFormatError(f"Invalid string in execution data: {exc}") from exc


def _write_var_int(stream: BinaryIO, value: int) -> None:
    while value & ~0x7F:
        stream.write(bytes([(value & 0x7F) | 0x80]))
        value >>= 7
    stream.write(bytes([value]))


def _read_var_int(stream: BinaryIO) -> int:
    value = 0
    shift = 0
    while True:
        byte = _read_exact(stream, 1)[0]
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value
        shift += 7
        if shift > 28:
            raise ExecDataFormatError("Variable-length integer too long")


def _write_boolean_array(stream: BinaryIO, values: tuple[bool, ...]) -> None:
    """Write a var-int length followed by bits packed LSB first."""
    _write_var_int(stream, len(values))
    for offset in range(0, len(values), 8):
        packed = 0
        for bit, value in enumerate(values[offset : offset + 8]):
            if value:
                packed |= 1 << bit
        stream.write(bytes([packed]))


def _read_boolean_array(stream: BinaryIO) -> tuple[bool, ...]:
    length = _read_var_int(stream)
    packed = _read_exact(stream, (length + 7) // 8)
    return tuple(bool(packed[index // 8] & (1 << (index % 8))) for index in range(length))
