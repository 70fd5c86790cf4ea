"""Pure decoders for the UCL NRV2B, NRV2D and NRV2E compression formats."""

from __future__ import annotations

import enum
from typing import Callable


class UclErrorKind(enum.Enum):
    GENERIC_ERROR = "generic UCL error"
    INVALID_ARGUMENT = "invalid argument"
    OUT_OF_MEMORY = "out of memory"
    NOT_COMPRESSIBLE = "not compressible"
    INPUT_OVERRUN = "input overrun"
    OUTPUT_OVERRUN = "output overrun"
    LOOKBEHIND_OVERRUN = "look-behind overrun"
    EOF_NOT_FOUND = "EOF not found"
    INPUT_NOT_CONSUMED = "input not consumed"
    OVERLAP_OVERRUN = "overlap overrun"
    SRC_TOO_LARGE = "src buffer too large"
    DST_TOO_LARGE = "dst buffer too large"
    DST_TOO_SMALL = "dst buffer too small"

    @classmethod
    def from_code(cls, code: int) -> "UclErrorKind":
        """Map a numeric UCL status code to an error kind."""
        return _CODES.get(code, cls.GENERIC_ERROR)

    def __str__(self) -> str:
        return self.value


_CODES = {
    -2: UclErrorKind.INVALID_ARGUMENT,
    -3: UclErrorKind.OUT_OF_MEMORY,
    -101: UclErrorKind.NOT_COMPRESSIBLE,
    -201: UclErrorKind.INPUT_OVERRUN,
    -202: UclErrorKind.OUTPUT_OVERRUN,
    -203: UclErrorKind.LOOKBEHIND_OVERRUN,
    -204: UclErrorKind.EOF_NOT_FOUND,
    -205: UclErrorKind.INPUT_NOT_CONSUMED,
    -206: UclErrorKind.OVERLAP_OVERRUN,
}


class UclError(Exception):
    """Decompression failed; ``kind`` tells why when it is a format error."""

    def __init__(self, message: "str | UclErrorKind", kind: UclErrorKind | None = None):
        if isinstance(message, UclErrorKind):
            kind = message
            message = str(message)
        super().__init__(message)
        self.kind = kind if kind is not None else UclErrorKind.GENERIC_ERROR


class _BitReader:
    def __init__(self, src: bytes):
        self.src = src
        self.pos = 0
        self.bb = 0

    def byte(self) -> int:
        if self.pos >= len(self.src):
            raise UclError(UclErrorKind.INPUT_OVERRUN)
        value = self.src[self.pos]
        self.pos += 1
        return value

    def bit(self) -> int:
        if self.bb & 0x7F:
            self.bb = (self.bb * 2) & 0x1FF
        else:
            self.bb = self.byte() * 2 + 1
        return (self.bb >> 8) & 1


_MAX_OFFSET_FIELD = 0xFFFFFF + 3


def _offset_2b(r: _BitReader) -> int:
    m_off = 1
    while True:
        m_off = m_off * 2 + r.bit()
        if m_off > _MAX_OFFSET_FIELD:
            raise UclError(UclErrorKind.LOOKBEHIND_OVERRUN)
        if r.bit():
            return m_off


def _offset_2de(r: _BitReader) -> int:
    m_off = 1
    while True:
        m_off = m_off * 2 + r.bit()
        if m_off > _MAX_OFFSET_FIELD:
            raise UclError(UclErrorKind.LOOKBEHIND_OVERRUN)
        if r.bit():
            return m_off
        m_off = (m_off - 1) * 2 + r.bit()


def _gamma(r: _BitReader, start: int) -> int:
    value = start
    while True:
        value = value * 2 + r.bit()
        if value > 0xFFFFFFFF:
            raise UclError(UclErrorKind.INPUT_OVERRUN)
        if r.bit():
            return value


def _decode(src: bytes, dst_capacity: int, variant: str) -> bytes:
    r = _BitReader(bytes(src))
    dst = bytearray()
    last_m_off = 1
    while True:
        while r.bit():
            if len(dst) >= dst_capacity:
                raise UclError(UclErrorKind.OUTPUT_OVERRUN)
            dst.append(r.byte())

        if variant == "2b":
            m_off = _offset_2b(r)
            if m_off == 2:
                m_off = last_m_off
            else:
                m_off = ((m_off - 3) * 256 + r.byte()) & 0xFFFFFFFF
                if m_off == 0xFFFFFFFF:
                    break
                m_off += 1
                last_m_off = m_off
            m_len = r.bit()
            m_len = m_len * 2 + r.bit()
            if m_len == 0:
                m_len = _gamma(r, 1) + 2
            m_len += m_off > 0xD00
        else:
            m_off = _offset_2de(r)
            if m_off == 2:
                m_off = last_m_off
                m_len = r.bit()
            else:
                m_off = ((m_off - 3) * 256 + r.byte()) & 0xFFFFFFFF
                if m_off == 0xFFFFFFFF:
                    break
                m_len = (m_off ^ 0xFFFFFFFF) & 1
                m_off = (m_off >> 1) + 1
                last_m_off = m_off
            if variant == "2d":
                m_len = m_len * 2 + r.bit()
                if m_len == 0:
                    m_len = _gamma(r, 1) + 2
            elif m_len:
                m_len = 1 + r.bit()
            elif r.bit():
                m_len = 3 + r.bit()
            else:
                m_len = _gamma(r, 1) + 3
            m_len += m_off > 0x500

        count = m_len + 1
        if m_off > len(dst):
            raise UclError(UclErrorKind.LOOKBEHIND_OVERRUN)
        if len(dst) + count > dst_capacity:
            raise UclError(UclErrorKind.OUTPUT_OVERRUN)
        start = len(dst) - m_off
        if m_off >= count:
            dst += dst[start:start + count]
        else:
            for i in range(count):
                dst.append(dst[start + i])

    if r.pos < len(r.src):
        raise UclError(UclErrorKind.INPUT_NOT_CONSUMED)
    return bytes(dst)


def nrv2b_decompress(src: bytes, dst_capacity: int) -> bytes:
    """Decode an NRV2B stream, producing at most *dst_capacity* bytes."""
    return _decode(src, dst_capacity, "2b")


def nrv2d_decompress(src: bytes, dst_capacity: int) -> bytes:
    """Decode an NRV2D stream, producing at most *dst_capacity* bytes."""
    return _decode(src, dst_capacity, "2d")


def nrv2e_decompress(src: bytes, dst_capacity: int) -> bytes:
    """Decode an NRV2E stream, producing at most *dst_capacity* bytes."""
    return _decode(src, dst_capacity, "2e")


_ALGORITHMS: dict[str, Callable[[bytes, int], bytes]] = {
    "nrv2b": nrv2b_decompress,
    "nrv2d": nrv2d_decompress,
    "nrv2e": nrv2e_decompress,
}

_MB = 1024 * 1024
MAX_INPUT_SIZE = 100 * _MB
MAX_BUFFER_SIZE = 200 * _MB


class UclDecompressor:
    """Decompresses UCL data with a chosen NRV algorithm."""

    def __init__(self, algorithm: str = "nrv2b"):
        try:
            self._decode = _ALGORITHMS[algorithm]
        except KeyError:
            raise ValueError(
                f"unknown UCL algorithm {algorithm!r}; expected one of {sorted(_ALGORITHMS)}"
            ) from None
        self.algorithm = algorithm

    def decompress(self, data: bytes) -> bytes:
        """Decompress *data*, growing the output limit while it overruns."""
        if not data:
            raise UclError("Input data is empty", UclErrorKind.INVALID_ARGUMENT)
        if len(data) < 4:
            raise UclError(
                "Input data too small (less than 4 bytes)", UclErrorKind.INVALID_ARGUMENT
            )
        if len(data) > MAX_INPUT_SIZE:
            raise UclError(
                f"Input data too large: {len(data)} bytes", UclErrorKind.SRC_TOO_LARGE
            )
        sizes = (len(data) * 20, len(data) * 50, len(data) * 100, 10 * _MB, 50 * _MB)
        for size in sizes:
            if size > MAX_BUFFER_SIZE:
                continue
            try:
                return self.try_decompress(data, size)
            except UclError as exc:
                if exc.kind is UclErrorKind.OUTPUT_OVERRUN:
                    continue
                raise UclError(f"UCL decompression failed: {exc.kind}", exc.kind) from exc
        raise UclError(
            "UCL decompression failed: all buffer sizes exhausted",
            UclErrorKind.OUTPUT_OVERRUN,
        )

    def try_decompress(self, data: bytes, buffer_size: int) -> bytes:
        """Decompress with a fixed output limit of *buffer_size* bytes."""
        if len(data) > 0xFFFFFFFF:
            raise UclError(UclErrorKind.SRC_TOO_LARGE)
        return self._decode(bytes(data), buffer_size)