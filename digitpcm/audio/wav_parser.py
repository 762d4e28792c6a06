"""
RIFF/WAVE 컨테이너 파서 모듈입니다.

역할:
- 메모리상의 바이트열을 WaveDescriptor로 파싱
- 청크 순서 차이, 알 수 없는 청크, 홀수 길이 패딩 바이트 처리
- 잘린 스트림/잘못된 헤더/지원하지 않는 포맷을 타입이 있는 에러로 보고

파일 위치 상태 대신 명시적인 커서(ByteCursor)를 사용하므로
실제 파일 I/O 없이 bytes만으로 테스트할 수 있습니다.

사용 예시:
    >>> with open("0.wav", "rb") as f:
    ...     desc = parse_wave(f.read())
    >>> desc.sample_rate, desc.channel_count, desc.bits_per_sample
    (16000, 1, 16)
"""

from __future__ import annotations

import logging
import struct
from typing import Optional

from digitpcm.audio import WaveDescriptor
from digitpcm.audio.errors import FormatError, UnsupportedFormatError

logger = logging.getLogger(__name__)

# RIFF 외곽 헤더 길이 ("RIFF" + size + "WAVE")
_RIFF_HEADER_SIZE = 12
# fmt 청크 최소 길이 (PCMWAVEFORMAT)
_FMT_MIN_SIZE = 16

_WAVE_FORMAT_PCM = 1
_SUPPORTED_BITS = (8, 16)


class ByteCursor:
    """
    bytes 위를 앞으로만 이동하는 읽기 커서입니다.

    요청한 길이만큼 읽을 수 없으면 FormatError("truncated stream")을 발생시킵니다.
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = memoryview(data)
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        return self._offset >= len(self._data)

    def read(self, size: int) -> bytes:
        """size 바이트를 읽고 커서를 전진시킵니다."""
        if size > self.remaining:
            raise FormatError(
                "truncated stream",
                field="offset",
                expected=self._offset + size,
                actual=len(self._data),
            )
        chunk = self._data[self._offset:self._offset + size].tobytes()
        self._offset += size
        return chunk

    def skip(self, size: int) -> None:
        """size 바이트를 건너뜁니다."""
        if size > self.remaining:
            raise FormatError(
                "truncated stream",
                field="offset",
                expected=self._offset + size,
                actual=len(self._data),
            )
        self._offset += size

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]


def parse_wave(data: bytes) -> WaveDescriptor:
    """
    RIFF/WAVE 바이트열을 파싱하여 WaveDescriptor를 생성합니다.

    처리 순서:
    1. 외곽 헤더("RIFF" ... "WAVE") 검증
    2. 청크를 순서대로 읽으며 "fmt "/"data" 수집, 그 외 청크는 건너뜀
    3. 두 청크가 모두 모이면 즉시 종료
    4. 포맷 코드(PCM) 및 비트뎁스(8/16) 검증

    파라미터:
        data: WAV 파일 전체 바이트

    반환값:
        WaveDescriptor: 검증 완료된 파싱 결과

    에러:
        FormatError: 헤더 불일치, fmt 청크 길이 부족, 잘린 스트림, data/fmt 청크 누락,
            샘플레이트 0
        UnsupportedFormatError: PCM이 아닌 포맷 코드, 8/16 이외의 비트뎁스
    """
    if len(data) < _RIFF_HEADER_SIZE or data[0:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise FormatError(
            "not RIFF/WAVE",
            field="header",
            expected="RIFF....WAVE",
            actual=bytes(data[0:12]),
        )

    cursor = ByteCursor(data, offset=_RIFF_HEADER_SIZE)
    fmt_fields: Optional[tuple[int, int, int, int]] = None
    sample_data: Optional[bytes] = None

    while not cursor.at_end():
        chunk_id = cursor.read(4)
        chunk_size = cursor.read_u32()

        if chunk_id == b"fmt ":
            payload = cursor.read(chunk_size)
            if chunk_size < _FMT_MIN_SIZE:
                raise FormatError(
                    "fmt chunk too small",
                    field="fmt chunk size",
                    expected=f">= {_FMT_MIN_SIZE}",
                    actual=chunk_size,
                )
            fmt_fields = _unpack_fmt(payload)
        elif chunk_id == b"data":
            sample_data = cursor.read(chunk_size)
        else:
            logger.debug(
                f"알 수 없는 청크 건너뜀: id={chunk_id!r}, size={chunk_size}, "
                f"offset={cursor.offset}"
            )
            cursor.skip(chunk_size)

        # 홀수 길이 청크 뒤에는 패딩 바이트 1개가 따라옴 (스트림 끝이면 생략 허용)
        if chunk_size % 2 == 1 and not cursor.at_end():
            cursor.skip(1)

        if fmt_fields is not None and sample_data is not None:
            break

    if sample_data is None:
        raise FormatError("no data chunk")
    if fmt_fields is None:
        raise FormatError("no fmt chunk")

    audio_format_code, channel_count, sample_rate, bits_per_sample = fmt_fields

    if audio_format_code != _WAVE_FORMAT_PCM:
        raise UnsupportedFormatError(
            "unsupported audio format",
            field="audio_format_code",
            expected=_WAVE_FORMAT_PCM,
            actual=audio_format_code,
        )
    if bits_per_sample not in _SUPPORTED_BITS:
        raise UnsupportedFormatError(
            "unsupported bits per sample",
            field="bits_per_sample",
            expected=_SUPPORTED_BITS,
            actual=bits_per_sample,
        )
    if sample_rate == 0:
        raise FormatError(
            "invalid sample rate",
            field="sample_rate",
            expected="> 0",
            actual=sample_rate,
        )

    return WaveDescriptor(
        sample_rate=sample_rate,
        channel_count=channel_count,
        bits_per_sample=bits_per_sample,
        audio_format_code=audio_format_code,
        sample_data=sample_data,
    )


def _unpack_fmt(payload: bytes) -> tuple[int, int, int, int]:
    """
    fmt 청크 payload에서 (포맷 코드, 채널 수, 샘플레이트, 비트뎁스)를 추출합니다.

    byte rate(8~11), block align(12~13) 및 16바이트 이후 확장 필드는 무시합니다.
    """
    audio_format_code, channel_count, sample_rate = struct.unpack_from("<HHI", payload, 0)
    (bits_per_sample,) = struct.unpack_from("<H", payload, 14)
    return audio_format_code, channel_count, sample_rate, bits_per_sample
