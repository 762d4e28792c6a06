"""
digitpcm: 숫자 음성 WAV → 8kHz/8bit/mono raw PCM 변환기

코어 진입점:
- decode_and_normalize(bytes) -> bytes
- process(path) -> bytes
"""

from digitpcm.audio.normalizer import SoundNormalizer, decode_and_normalize, process

__all__ = ["SoundNormalizer", "decode_and_normalize", "process"]

__version__ = "0.1.0"
