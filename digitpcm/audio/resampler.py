"""
선형 보간 리샘플러 모듈입니다.

역할:
- mono float64 신호를 다른 샘플레이트로 변환 (선형 보간)
- 길이는 재생 시간을 보존하도록 round(L / sr_from × sr_to)로 결정
- 마지막 구간은 외삽 없이 마지막 입력 샘플로 고정

안티에일리어싱 필터는 적용하지 않습니다. 다운샘플링 시 목표 레이트의
나이퀴스트 주파수 이상 성분은 에일리어싱될 수 있습니다.

사용 예시:
    >>> out = resample_linear(np.array([0.5, -0.5]), 16000, 8000)
    >>> out.tolist()
    [0.5]
"""

from __future__ import annotations

import logging
import math

import numpy as np

from digitpcm.audio import Signal

logger = logging.getLogger(__name__)


def resample_linear(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """
    선형 보간으로 샘플레이트를 변환합니다.

    출력 i번째 샘플은 원본 위치 pos = i × (from_rate / to_rate)에서
    x[idx] × (1 - frac) + x[idx + 1] × frac 로 계산합니다.
    idx >= len - 1 이면 마지막 입력 샘플을 그대로 사용합니다.

    파라미터:
        samples: float64 mono 배열
        from_rate: 입력 샘플레이트 (Hz)
        to_rate: 출력 샘플레이트 (Hz)

    반환값:
        np.ndarray: 리샘플링된 새 float64 배열 (입력은 수정하지 않음)

    에러:
        ValueError: 샘플레이트가 0 이하일 때
    """
    if from_rate <= 0 or to_rate <= 0:
        raise ValueError(
            f"샘플레이트는 양수여야 합니다: from_rate={from_rate}, to_rate={to_rate}"
        )

    x = np.asarray(samples, dtype=np.float64)
    if from_rate == to_rate or x.shape[0] == 0:
        return x.copy()

    length = x.shape[0]
    duration_sec = length / from_rate
    out_length = _round_half_away(duration_sec * to_rate)
    if out_length <= 0:
        return np.empty(0, dtype=np.float64)

    ratio = from_rate / to_rate
    pos = np.arange(out_length, dtype=np.float64) * ratio
    idx = np.floor(pos).astype(np.int64)
    frac = pos - idx

    out = np.empty(out_length, dtype=np.float64)
    edge = idx >= length - 1
    out[edge] = x[length - 1]

    inner = ~edge
    i0 = idx[inner]
    f = frac[inner]
    out[inner] = x[i0] * (1.0 - f) + x[i0 + 1] * f

    logger.debug(
        f"리샘플링: {from_rate}Hz → {to_rate}Hz, {length} → {out_length} samples"
    )
    return out


def resample_signal(signal: Signal, to_rate: int) -> Signal:
    """Signal을 to_rate로 리샘플링한 새 Signal을 반환합니다."""
    return Signal(
        samples=resample_linear(signal.samples, signal.sample_rate, to_rate),
        sample_rate=to_rate,
    )


def _round_half_away(value: float) -> int:
    """0.5는 0에서 먼 쪽으로 반올림합니다 (Python round()의 은행가 반올림과 다름)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))
