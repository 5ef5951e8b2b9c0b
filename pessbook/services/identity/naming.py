"""Display names and person metadata derived from external image ids."""
import json
import re
from typing import Any, Dict, Optional

from pessbook.core.logging import get_logger
from pessbook.core.utils.paths import EXTERNAL_ID_SEPARATOR

logger = get_logger(__name__)

UNKNOWN_NAME = "Unknown"

# Only strip what looks like a file extension, e.g. ".jpg" or ".jpeg"
_FILE_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,5}$")


def parse_person_info(external_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode person metadata from an external image id holding a JSON object.

    Returns None when the id is not a JSON object or fails to parse.
    """
    if not external_id:
        return None
    text = external_id.strip()
    if not (text.startswith("{") and text.endswith("}")):
        return None

    try:
        person_info = json.loads(text)
    except ValueError as e:
        logger.warning(
            "Failed to parse person metadata from external image id",
            external_id=external_id,
            error=str(e)
        )
        return None

    if not isinstance(person_info, dict):
        return None
    return person_info


def derive_display_name(
    external_id: Optional[str],
    person_info: Optional[Dict[str, Any]] = None
) -> str:
    """Derive a human readable name for a face match.

    Preference order: the ``name`` in the person metadata, the file name of
    a colon-delimited external id (extension dropped, underscores as
    spaces), the raw external id with dashes as spaces, then "Unknown".
    """
    if person_info:
        name = person_info.get("name")
        if isinstance(name, str) and name.strip():
            return name

    if not external_id:
        return UNKNOWN_NAME

    if EXTERNAL_ID_SEPARATOR in external_id:
        filename = external_id.rsplit(EXTERNAL_ID_SEPARATOR, 1)[1]
        name = _FILE_EXTENSION.sub("", filename).replace("_", " ")
    else:
        name = external_id.replace("-", " ")

    return name.strip() or UNKNOWN_NAME
