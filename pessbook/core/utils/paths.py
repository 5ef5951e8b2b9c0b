"""
Conversions between S3 keys and external image ids.

Faces are indexed with an external image id derived from the S3 key of the
image they were found in: folder separators become colons and whitespace
becomes underscores, e.g.

    PNG/NATIONAL CAPITAL DISTRICT/MORESBY NORTH-EAST/130168379_Soare_Nuana_F.jpg
    PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_NORTH-EAST:130168379_Soare_Nuana_F.jpg
"""
import re
from typing import List, NamedTuple

EXTERNAL_ID_SEPARATOR = ":"
PATH_SEPARATOR = "/"

_WHITESPACE = re.compile(r"\s+")


class ParsedExternalId(NamedTuple):
    """Components of an external image id."""
    folders: List[str]
    display_folders: List[str]
    filename: str
    full_path: str


def s3_path_to_external_id(s3_path: str) -> str:
    """Convert an S3 key into the external image id used at index time."""
    parts = s3_path.split(PATH_SEPARATOR)
    return EXTERNAL_ID_SEPARATOR.join(_WHITESPACE.sub("_", part) for part in parts)


def external_id_to_s3_path(external_id: str) -> str:
    """Convert an external image id back into an S3 key.

    Underscores are turned back into spaces in folder segments only; the
    file name keeps its underscores.
    """
    if not external_id:
        return ""
    parts = external_id.split(EXTERNAL_ID_SEPARATOR)
    folders = [part.replace("_", " ") for part in parts[:-1]]
    return PATH_SEPARATOR.join(folders + [parts[-1]])


def parse_external_id(external_id: str) -> ParsedExternalId:
    """Split an external image id into folders, display folders and file name."""
    if not external_id:
        return ParsedExternalId(folders=[], display_folders=[], filename="", full_path="")

    parts = external_id.split(EXTERNAL_ID_SEPARATOR)
    folders = parts[:-1]
    return ParsedExternalId(
        folders=folders,
        display_folders=[folder.replace("_", " ") for folder in folders],
        filename=parts[-1],
        full_path=external_id_to_s3_path(external_id),
    )


def parent_folder(key: str) -> str:
    """Get the key minus its final path segment."""
    return key.rsplit(PATH_SEPARATOR, 1)[0] if PATH_SEPARATOR in key else ""


def residential_path_to_folder(residential_path: str) -> str:
    """Convert a colon-delimited residential path into an S3 folder."""
    return residential_path.replace(EXTERNAL_ID_SEPARATOR, PATH_SEPARATOR)


def build_person_filename(first_name: str, last_name: str, timestamp: int) -> str:
    """Build the file name a registered person's photo is stored under."""
    formatted_name = _WHITESPACE.sub("_", f"{first_name}_{last_name}")
    return f"{timestamp}_{formatted_name}.jpg"
