"""
8bit unsigned 양자화 모듈입니다.

-1.0~+1.0 float 신호를 0~255 정수로 선형 매핑합니다.
범위를 벗어난 값은 클리핑하며, 반올림은 0.5를 0에서 먼 쪽으로 올립니다
(0.0 → 128, -1.0 → 0, +1.0 → 255).
"""

from __future__ import annotations

import numpy as np

from digitpcm.audio.errors import CorruptDataError

_UINT8_MAX = 255.0


def quantize_u8(samples: np.ndarray) -> bytes:
    """
    float 신호를 unsigned 8bit PCM 바이트로 양자화합니다.

    파라미터:
        samples: float mono 배열

    반환값:
        bytes: 입력과 길이가 같은 unsigned 8bit 샘플

    에러:
        CorruptDataError: NaN 샘플이 포함된 경우
    """
    x = np.asarray(samples, dtype=np.float64)
    if np.isnan(x).any():
        raise CorruptDataError(
            "NaN sample",
            field="samples",
            expected="finite amplitude",
            actual=f"{int(np.isnan(x).sum())} NaN",
        )
    clipped = np.clip(x, -1.0, 1.0)
    scaled = (clipped + 1.0) * 0.5 * _UINT8_MAX
    # 클리핑 후 scaled >= 0 이므로 floor(y + 0.5)가 half-away-from-zero와 같음
    return np.floor(scaled + 0.5).astype(np.uint8).tobytes()
