import struct
from pathlib import Path

import numpy as np

from speech_score.errors import (
    FormatError,
    MissingDataChunkError,
    NotRiffError,
    TruncatedHeaderError,
    UnsupportedBitDepthError,
)
from speech_score.log import get_logger
from speech_score.models import RawPcmBuffer, WavHeader

logger = get_logger(__name__)

SUPPORTED_BIT_DEPTHS = (16, 32)

# Fixed offsets of the canonical 44-byte header ("fmt " right after RIFF/WAVE)
_CHANNELS_OFFSET = 22
_RATE_OFFSET = 24
_BITS_OFFSET = 34
_CHUNK_SCAN_START = 36

_SAMPLE_DTYPES = {16: np.dtype("<i2"), 32: np.dtype("<i4")}


def _find_data_chunk(data: bytes) -> tuple[int, int]:
    """Return (payload_offset, declared_size) of the first "data" chunk."""
    offset = _CHUNK_SCAN_START
    while offset + 8 <= len(data):
        chunk_id = data[offset:offset + 4]
        chunk_size = struct.unpack_from("<I", data, offset + 4)[0]
        if chunk_id == b"data":
            return offset + 8, chunk_size
        logger.debug(f"[WAV] Skipping chunk {chunk_id!r} ({chunk_size} bytes) at offset {offset}")
        offset += 8 + chunk_size
    raise MissingDataChunkError()


def parse_header(data: bytes) -> WavHeader:
    if data[:4] != b"RIFF":
        raise NotRiffError(bytes(data[:4]))
    if len(data) < _CHUNK_SCAN_START:
        raise TruncatedHeaderError(len(data))

    channel_count = struct.unpack_from("<H", data, _CHANNELS_OFFSET)[0]
    sample_rate = struct.unpack_from("<I", data, _RATE_OFFSET)[0]
    bits_per_sample = struct.unpack_from("<H", data, _BITS_OFFSET)[0]

    if bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedBitDepthError(bits_per_sample)
    if channel_count == 0:
        raise FormatError("WAV header declares zero channels")
    if sample_rate == 0:
        raise FormatError("WAV header declares a sample rate of 0Hz")

    data_offset, data_length = _find_data_chunk(data)

    return WavHeader(
        channel_count=channel_count,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        data_byte_offset=data_offset,
        data_byte_length=data_length,
    )


def parse_wav(data: bytes) -> RawPcmBuffer:
    """
    Parse a PCM WAV byte buffer into its header and interleaved integer samples.

    Only 16- and 32-bit signed PCM is accepted. Chunks other than "data"
    (LIST, fact, ...) between the format header and the payload are skipped.
    """
    header = parse_header(data)

    available = len(data) - header.data_byte_offset
    if header.data_byte_length > available:
        # Recorder did not finalize the header; keep the whole frames we have.
        clamped = available - (available % header.block_align)
        logger.warning(
            f"[WAV] Data chunk declares {header.data_byte_length} bytes but only {available} present, "
            f"using {clamped}"
        )
        header = WavHeader(
            channel_count=header.channel_count,
            sample_rate=header.sample_rate,
            bits_per_sample=header.bits_per_sample,
            data_byte_offset=header.data_byte_offset,
            data_byte_length=clamped,
        )

    frame_count = header.frame_count
    sample_count = frame_count * header.channel_count
    samples = np.frombuffer(
        data,
        dtype=_SAMPLE_DTYPES[header.bits_per_sample],
        count=sample_count,
        offset=header.data_byte_offset,
    )

    logger.debug(
        f"[WAV] channels={header.channel_count} rate={header.sample_rate}Hz "
        f"bits={header.bits_per_sample} data={header.data_byte_length}B frames={frame_count}"
    )
    if header.sample_rate != 16000:
        logger.debug(f"[WAV] Sample rate is {header.sample_rate}Hz, will resample to 16kHz")
    if header.channel_count != 1:
        logger.debug(f"[WAV] {header.channel_count} channels, will downmix to mono")

    return RawPcmBuffer(header=header, samples=samples)


def read_wav_file(path: str | Path) -> RawPcmBuffer:
    data = Path(path).read_bytes()
    logger.debug(f"[WAV] Read {path} ({len(data) / 1024:.2f}KB)")
    return parse_wav(data)
