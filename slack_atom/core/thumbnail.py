"""
Tiny Thumbnail Reconstruction

Slack attaches a ``thumb_tiny`` blob to image files: a baseline JPEG with
its headers stripped. Layout of the decoded blob:

    byte 0      discriminant, selects one of six header templates
    bytes 1-4   image height and width, big-endian 16 bit each, exactly as
                they appear in the SOF0 frame header
    bytes 5-    entropy-coded scan data

Each template is a complete JPEG header (SOI, JFIF APP0, DQT, SOF0, DHT,
SOS) for one chroma subsampling / quantization profile. Splicing the
dimension bytes into the SOF0 frame header and appending the scan data
yields a decodable JPEG.

Limitation: the templates are assembled from the example tables of ITU T.81
Annex K, scaled to IJG qualities 50 and 75. They are not copies of the
headers Slack strips, so a blob encoded with other tables decodes with
wrong colours or not at all. Replace TEMPLATES once the real header bytes
are known.
"""

import base64
import binascii
import logging
import struct
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from slack_atom.errors import UnrecognizedThumbnailFormatError

logger = logging.getLogger(__name__)

# Annex K.1 quantization tables, natural (row-major) order
LUMINANCE_QUANTIZATION = [
    16, 11, 10, 16, 24, 40, 51, 61,
    12, 12, 14, 19, 26, 58, 60, 55,
    14, 13, 16, 24, 40, 57, 69, 56,
    14, 17, 22, 29, 51, 87, 80, 62,
    18, 22, 37, 56, 68, 109, 103, 77,
    24, 35, 55, 64, 81, 104, 113, 92,
    49, 64, 78, 87, 103, 121, 120, 101,
    72, 92, 95, 98, 112, 100, 103, 99,
]

CHROMINANCE_QUANTIZATION = [
    17, 18, 24, 47, 99, 99, 99, 99,
    18, 21, 26, 66, 99, 99, 99, 99,
    24, 26, 56, 99, 99, 99, 99, 99,
    47, 66, 99, 99, 99, 99, 99, 99,
] + [99] * 32

# Natural-order index of each zigzag position
ZIGZAG = [
    0, 1, 8, 16, 9, 2, 3, 10, 17, 24, 32, 25, 18, 11, 4, 5,
    12, 19, 26, 33, 40, 48, 41, 34, 27, 20, 13, 6, 7, 14, 21, 28,
    35, 42, 49, 56, 57, 50, 43, 36, 29, 22, 15, 23, 30, 37, 44, 51,
    58, 59, 52, 45, 38, 31, 39, 46, 53, 60, 61, 54, 47, 55, 62, 63,
]

# Annex K.3 Huffman tables: (class/id, code counts per length, symbols)
DC_LUMINANCE = (
    0x00,
    [0, 1, 5, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0],
    list(range(12)),
)

DC_CHROMINANCE = (
    0x01,
    [0, 3, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0],
    list(range(12)),
)

AC_LUMINANCE = (
    0x10,
    [0, 2, 1, 3, 3, 2, 4, 3, 5, 5, 4, 4, 0, 0, 1, 0x7D],
    [
        0x01, 0x02, 0x03, 0x00, 0x04, 0x11, 0x05, 0x12, 0x21, 0x31, 0x41, 0x06, 0x13, 0x51, 0x61, 0x07,
        0x22, 0x71, 0x14, 0x32, 0x81, 0x91, 0xA1, 0x08, 0x23, 0x42, 0xB1, 0xC1, 0x15, 0x52, 0xD1, 0xF0,
        0x24, 0x33, 0x62, 0x72, 0x82, 0x09, 0x0A, 0x16, 0x17, 0x18, 0x19, 0x1A, 0x25, 0x26, 0x27, 0x28,
        0x29, 0x2A, 0x34, 0x35, 0x36, 0x37, 0x38, 0x39, 0x3A, 0x43, 0x44, 0x45, 0x46, 0x47, 0x48, 0x49,
        0x4A, 0x53, 0x54, 0x55, 0x56, 0x57, 0x58, 0x59, 0x5A, 0x63, 0x64, 0x65, 0x66, 0x67, 0x68, 0x69,
        0x6A, 0x73, 0x74, 0x75, 0x76, 0x77, 0x78, 0x79, 0x7A, 0x83, 0x84, 0x85, 0x86, 0x87, 0x88, 0x89,
        0x8A, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97, 0x98, 0x99, 0x9A, 0xA2, 0xA3, 0xA4, 0xA5, 0xA6, 0xA7,
        0xA8, 0xA9, 0xAA, 0xB2, 0xB3, 0xB4, 0xB5, 0xB6, 0xB7, 0xB8, 0xB9, 0xBA, 0xC2, 0xC3, 0xC4, 0xC5,
        0xC6, 0xC7, 0xC8, 0xC9, 0xCA, 0xD2, 0xD3, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8, 0xD9, 0xDA, 0xE1, 0xE2,
        0xE3, 0xE4, 0xE5, 0xE6, 0xE7, 0xE8, 0xE9, 0xEA, 0xF1, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7, 0xF8,
        0xF9, 0xFA,
    ],
)

AC_CHROMINANCE = (
    0x11,
    [0, 2, 1, 2, 4, 4, 3, 4, 7, 5, 4, 4, 0, 1, 2, 0x77],
    [
        0x00, 0x01, 0x02, 0x03, 0x11, 0x04, 0x05, 0x21, 0x31, 0x06, 0x12, 0x41, 0x51, 0x07, 0x61, 0x71,
        0x13, 0x22, 0x32, 0x81, 0x08, 0x14, 0x42, 0x91, 0xA1, 0xB1, 0xC1, 0x09, 0x23, 0x33, 0x52, 0xF0,
        0x15, 0x62, 0x72, 0xD1, 0x0A, 0x16, 0x24, 0x34, 0xE1, 0x25, 0xF1, 0x17, 0x18, 0x19, 0x1A, 0x26,
        0x27, 0x28, 0x29, 0x2A, 0x35, 0x36, 0x37, 0x38, 0x39, 0x3A, 0x43, 0x44, 0x45, 0x46, 0x47, 0x48,
        0x49, 0x4A, 0x53, 0x54, 0x55, 0x56, 0x57, 0x58, 0x59, 0x5A, 0x63, 0x64, 0x65, 0x66, 0x67, 0x68,
        0x69, 0x6A, 0x73, 0x74, 0x75, 0x76, 0x77, 0x78, 0x79, 0x7A, 0x82, 0x83, 0x84, 0x85, 0x86, 0x87,
        0x88, 0x89, 0x8A, 0x92, 0x93, 0x94, 0x95, 0x96, 0x97, 0x98, 0x99, 0x9A, 0xA2, 0xA3, 0xA4, 0xA5,
        0xA6, 0xA7, 0xA8, 0xA9, 0xAA, 0xB2, 0xB3, 0xB4, 0xB5, 0xB6, 0xB7, 0xB8, 0xB9, 0xBA, 0xC2, 0xC3,
        0xC4, 0xC5, 0xC6, 0xC7, 0xC8, 0xC9, 0xCA, 0xD2, 0xD3, 0xD4, 0xD5, 0xD6, 0xD7, 0xD8, 0xD9, 0xDA,
        0xE2, 0xE3, 0xE4, 0xE5, 0xE6, 0xE7, 0xE8, 0xE9, 0xEA, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6, 0xF7, 0xF8,
        0xF9, 0xFA,
    ],
)


@dataclass(frozen=True)
class ThumbnailProfile:
    """Header parameters behind one discriminant value."""

    luma_sampling: int  # Horizontal << 4 | vertical sampling factor of Y
    quality: int  # IJG quality the quantization tables are scaled to


# Discriminant byte -> profile
PROFILES: Dict[int, ThumbnailProfile] = {
    1: ThumbnailProfile(luma_sampling=0x22, quality=50),  # 4:2:0
    2: ThumbnailProfile(luma_sampling=0x21, quality=50),  # 4:2:2
    3: ThumbnailProfile(luma_sampling=0x11, quality=50),  # 4:4:4
    4: ThumbnailProfile(luma_sampling=0x22, quality=75),
    5: ThumbnailProfile(luma_sampling=0x21, quality=75),
    6: ThumbnailProfile(luma_sampling=0x11, quality=75),
}

HEADER_LENGTH = 5
UNRECOGNIZED_PLACEHOLDER = "(thumbnail in unrecognized format {discriminant})"
INVALID_PLACEHOLDER = "(thumbnail data is not valid base64)"


def _segment(marker: int, payload: bytes) -> bytes:
    return struct.pack(">BBH", 0xFF, marker, len(payload) + 2) + payload


def scale_quantization(table: Sequence[int], quality: int) -> List[int]:
    """Scale an Annex K table to an IJG quality setting, returned in zigzag order."""
    scale = 5000 // quality if quality < 50 else 200 - 2 * quality
    scaled = [min(max((value * scale + 50) // 100, 1), 255) for value in table]
    return [scaled[index] for index in ZIGZAG]


def _quantization_segment(quality: int) -> bytes:
    payload = bytes([0x00] + scale_quantization(LUMINANCE_QUANTIZATION, quality))
    payload += bytes([0x01] + scale_quantization(CHROMINANCE_QUANTIZATION, quality))
    return _segment(0xDB, payload)


def _huffman_segment() -> bytes:
    payload = b""
    for table_id, counts, symbols in (DC_LUMINANCE, AC_LUMINANCE, DC_CHROMINANCE, AC_CHROMINANCE):
        payload += bytes([table_id] + counts + symbols)
    return _segment(0xC4, payload)


def _frame_segment(luma_sampling: int) -> bytes:
    # Height and width are zero here; they are patched in per thumbnail
    payload = struct.pack(">BHHB", 8, 0, 0, 3)
    payload += bytes([1, luma_sampling, 0, 2, 0x11, 1, 3, 0x11, 1])
    return _segment(0xC0, payload)


def _scan_segment() -> bytes:
    return _segment(0xDA, bytes([3, 1, 0x00, 2, 0x11, 3, 0x11, 0, 63, 0]))


def build_template(profile: ThumbnailProfile) -> bytes:
    """Assemble the complete JPEG header for one profile, up to the scan data."""
    jfif = _segment(0xE0, b"JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00")
    return (
        b"\xff\xd8"
        + jfif
        + _quantization_segment(profile.quality)
        + _frame_segment(profile.luma_sampling)
        + _huffman_segment()
        + _scan_segment()
    )


TEMPLATES: Dict[int, bytes] = {
    discriminant: build_template(profile) for discriminant, profile in PROFILES.items()
}

# SOF0 marker (2) + length (2) + sample precision (1) precede height and width.
# All templates share segment lengths up to the frame header.
DIMENSION_OFFSET = TEMPLATES[1].index(b"\xff\xc0") + 5


def decode_dimensions(dimension_bytes: bytes) -> Tuple[int, int]:
    """Return (width, height) from the four SOF0 dimension bytes."""
    height, width = struct.unpack(">HH", dimension_bytes)
    return width, height


def reconstruct_jpeg(blob: bytes) -> bytes:
    """
    Rebuild complete JPEG bytes from a decoded thumbnail blob.

    Raises:
        UnrecognizedThumbnailFormatError: If the discriminant has no template
    """
    if len(blob) < HEADER_LENGTH:
        raise UnrecognizedThumbnailFormatError(blob[0] if blob else -1)
    discriminant = blob[0]
    template = TEMPLATES.get(discriminant)
    if template is None:
        raise UnrecognizedThumbnailFormatError(discriminant)
    return (
        template[:DIMENSION_OFFSET]
        + blob[1:HEADER_LENGTH]
        + template[DIMENSION_OFFSET + 4:]
        + blob[HEADER_LENGTH:]
    )


def reconstruct(thumb_tiny: str) -> str:
    """
    Turn a base64 ``thumb_tiny`` blob into a ``data:image/jpeg`` URI.

    Unknown formats are not fatal: a short placeholder text is returned
    instead, so callers can show it in place of the image.
    """
    try:
        blob = base64.b64decode(thumb_tiny, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Thumbnail blob is not valid base64")
        return INVALID_PLACEHOLDER
    try:
        jpeg = reconstruct_jpeg(blob)
    except UnrecognizedThumbnailFormatError as e:
        logger.warning(str(e))
        return UNRECOGNIZED_PLACEHOLDER.format(discriminant=e.discriminant)
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")


def is_data_uri(value: str) -> bool:
    return value.startswith("data:")
