"""Tests for S3 key and external image id conversions."""
from pessbook.core.utils.paths import (
    build_person_filename,
    external_id_to_s3_path,
    parent_folder,
    parse_external_id,
    residential_path_to_folder,
    s3_path_to_external_id,
)

KEY = "PNG/NATIONAL CAPITAL DISTRICT/MORESBY NORTH-EAST/130168379_Soare_Nuana_F.jpg"
EXTERNAL_ID = "PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_NORTH-EAST:130168379_Soare_Nuana_F.jpg"


def test_s3_path_to_external_id():
    assert s3_path_to_external_id(KEY) == EXTERNAL_ID


def test_s3_path_collapses_whitespace_runs():
    assert s3_path_to_external_id("PNG/EAST  SEPIK/a b.jpg") == "PNG:EAST_SEPIK:a_b.jpg"


def test_external_id_to_s3_path_keeps_filename_underscores():
    assert external_id_to_s3_path(EXTERNAL_ID) == KEY
    assert external_id_to_s3_path("") == ""


def test_parse_external_id():
    parsed = parse_external_id(EXTERNAL_ID)

    assert parsed.folders == ["PNG", "NATIONAL_CAPITAL_DISTRICT", "MORESBY_NORTH-EAST"]
    assert parsed.display_folders == ["PNG", "NATIONAL CAPITAL DISTRICT", "MORESBY NORTH-EAST"]
    assert parsed.filename == "130168379_Soare_Nuana_F.jpg"
    assert parsed.full_path == KEY


def test_parse_empty_external_id():
    parsed = parse_external_id("")

    assert parsed.folders == []
    assert parsed.filename == ""


def test_parent_folder():
    assert parent_folder("PNG/Momase/Madang/John_Doe.jpg") == "PNG/Momase/Madang"
    assert parent_folder("John_Doe.jpg") == ""


def test_residential_path_to_folder():
    assert residential_path_to_folder("PNG:Momase:Madang") == "PNG/Momase/Madang"


def test_build_person_filename():
    assert build_person_filename("John Paul", "Doe", 1700000000000) == "1700000000000_John_Paul_Doe.jpg"
