"""
Tests for tiny thumbnail reconstruction.
"""

import base64
import struct

import pytest

from slack_atom.core import thumbnail
from slack_atom.core.thumbnail import (
    DIMENSION_OFFSET,
    PROFILES,
    TEMPLATES,
    decode_dimensions,
    reconstruct,
    reconstruct_jpeg,
)
from slack_atom.errors import UnrecognizedThumbnailFormatError

SCAN_DATA = b"\x12\x34\x56\x78\x9a\xbc\xff\xd9"


def make_blob(discriminant, width, height, scan=SCAN_DATA):
    return bytes([discriminant]) + struct.pack(">HH", height, width) + scan


def test_six_templates():
    assert sorted(TEMPLATES) == [1, 2, 3, 4, 5, 6]
    assert len(set(TEMPLATES.values())) == 6


@pytest.mark.parametrize("discriminant", sorted(PROFILES))
def test_templates_share_dimension_offset(discriminant):
    template = TEMPLATES[discriminant]
    assert template.startswith(b"\xff\xd8")
    assert template[DIMENSION_OFFSET - 5:DIMENSION_OFFSET - 3] == b"\xff\xc0"
    assert template[DIMENSION_OFFSET:DIMENSION_OFFSET + 4] == b"\x00\x00\x00\x00"
    # Template ends with the scan header
    assert template[-14:-12] == b"\xff\xda"


@pytest.mark.parametrize("discriminant", sorted(PROFILES))
def test_reconstruct_patches_dimensions(discriminant):
    jpeg = reconstruct_jpeg(make_blob(discriminant, 321, 123))
    template = TEMPLATES[discriminant]

    assert decode_dimensions(jpeg[DIMENSION_OFFSET:DIMENSION_OFFSET + 4]) == (321, 123)
    assert jpeg[:DIMENSION_OFFSET] == template[:DIMENSION_OFFSET]
    assert jpeg[DIMENSION_OFFSET + 4:len(template)] == template[DIMENSION_OFFSET + 4:]
    assert jpeg[len(template):] == SCAN_DATA


def test_discriminant_one_example():
    jpeg = reconstruct_jpeg(make_blob(1, 100, 50))
    height, width = struct.unpack(">HH", jpeg[DIMENSION_OFFSET:DIMENSION_OFFSET + 4])
    assert (width, height) == (100, 50)
    assert jpeg[DIMENSION_OFFSET:DIMENSION_OFFSET + 4] == b"\x00\x32\x00\x64"


def test_profiles_differ_in_sampling_and_quantization():
    # Y component sampling factor sits right after height, width and component count
    sampling = {d: TEMPLATES[d][DIMENSION_OFFSET + 6] for d in TEMPLATES}
    assert sampling[1] == sampling[4] == 0x22
    assert sampling[2] == sampling[5] == 0x21
    assert sampling[3] == sampling[6] == 0x11
    assert TEMPLATES[1] != TEMPLATES[4]


def test_quality_50_keeps_reference_table():
    scaled = thumbnail.scale_quantization(thumbnail.LUMINANCE_QUANTIZATION, 50)
    assert scaled[:3] == [16, 11, 12]


def test_reconstruct_returns_data_uri():
    blob = base64.b64encode(make_blob(3, 40, 30)).decode()
    uri = reconstruct(blob)

    assert uri.startswith("data:image/jpeg;base64,")
    jpeg = base64.b64decode(uri.split(",", 1)[1])
    assert jpeg.startswith(b"\xff\xd8")
    assert decode_dimensions(jpeg[DIMENSION_OFFSET:DIMENSION_OFFSET + 4]) == (40, 30)


def test_unknown_discriminant_is_not_fatal():
    blob = base64.b64encode(make_blob(9, 40, 30)).decode()
    result = reconstruct(blob)

    assert not thumbnail.is_data_uri(result)
    assert "unrecognized format 9" in result


def test_unknown_discriminant_raises_in_strict_api():
    with pytest.raises(UnrecognizedThumbnailFormatError):
        reconstruct_jpeg(make_blob(0, 1, 1))


def test_truncated_blob():
    with pytest.raises(UnrecognizedThumbnailFormatError):
        reconstruct_jpeg(b"\x01\x00")


def test_invalid_base64():
    assert reconstruct("not base64!!") == thumbnail.INVALID_PLACEHOLDER
