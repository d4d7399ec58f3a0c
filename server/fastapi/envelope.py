from typing import Any

from pydantic import BaseModel

from models import EnvelopeMessage, ResponseEnvelope


def normalize(
    success: bool,
    data: BaseModel | dict[str, Any] | None,
    status_code: int,
    raw_message: str,
) -> ResponseEnvelope:
    """Wrap an upstream outcome into the {success, data, messages} envelope.

    Failures carry exactly one error message and no data; successes carry data
    and no messages.
    """
    if not success:
        return ResponseEnvelope(
            success=False,
            data=None,
            messages=[EnvelopeMessage(code=status_code, type="error", message=raw_message)],
        )

    if isinstance(data, BaseModel):
        data = data.model_dump()
    return ResponseEnvelope(success=True, data=data, messages=[])


def failure(status_code: int, message: str) -> ResponseEnvelope:
    return normalize(False, None, status_code, message)
