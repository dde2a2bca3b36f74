from typing import Any, Dict, Optional

from .models import ProfileRecord

SUCCESS_MESSAGE = "Profile scraped and saved successfully"


def build_response(record: ProfileRecord, saved_to: Optional[str]) -> Dict[str, Any]:
    """Compose the `POST /scrape` success body.

    Profile fields sit at the top level, followed by `message` and
    `savedTo` (null when the result file could not be written).
    """
    payload = record.to_json_dict()
    payload["message"] = SUCCESS_MESSAGE if saved_to else "Profile scraped; result file was not written"
    payload["savedTo"] = saved_to
    return payload


def build_error(error: str, details: str = "") -> Dict[str, Any]:
    return {"error": error, "details": details}
