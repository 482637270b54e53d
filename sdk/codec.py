"""Codec — turns raw JSON envelopes into :mod:`sdk.models` entities.

Every decode goes through :meth:`Codec.check` first, so an envelope with
``ok: false`` always surfaces as the matching :class:`~sdk.exceptions.APIException`
subclass instead of a half-built model.
"""

from __future__ import annotations

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from core.logger import ReactorLogger
from sdk.exceptions import UnclassifiedServiceError, exception_for
from sdk.models import Envelope, Update

logger = ReactorLogger.get_logger()

M = TypeVar("M", bound=BaseModel)

# error_code reported when an ok envelope carries a payload we cannot decode
MALFORMED_PAYLOAD = 0

_UPDATES = TypeAdapter(List[Update])


class Codec:
    """Decode Bot API responses into typed models."""

    def check(self, body: Dict[str, Any]) -> Envelope:
        """Validate the envelope and raise if the service reported a failure.

        Raises:
            InvalidCredential: ``error_code`` 401.
            PrincipalNotFound: ``error_code`` 404.
            UnclassifiedServiceError: any other failure, or a body that is not
                an envelope at all.
        """
        try:
            envelope = Envelope.model_validate(body)
        except ValidationError as exc:
            logger.error("Response is not a Bot API envelope", extra={"error": str(exc)})
            raise UnclassifiedServiceError(MALFORMED_PAYLOAD, {"description": "Malformed envelope"}) from exc
        if not envelope.ok:
            code = envelope.error_code if envelope.error_code is not None else MALFORMED_PAYLOAD
            raise exception_for(code, body)
        return envelope

    def decode_updates(self, body: Dict[str, Any]) -> List[Update]:
        """Decode a ``getUpdates`` response into updates, preserving order."""
        envelope = self.check(body)
        try:
            return _UPDATES.validate_python(envelope.result or [])
        except ValidationError as exc:
            logger.error("Failed to decode update batch", extra={"api_endpoint": "getUpdates", "error": str(exc)})
            raise UnclassifiedServiceError(MALFORMED_PAYLOAD, {"description": "Malformed update batch"}) from exc

    def decode(self, body: Dict[str, Any], model: Type[M]) -> M:
        """Decode a single-entity response (e.g. ``getMe``) into *model*."""
        envelope = self.check(body)
        try:
            return model.model_validate(envelope.result)
        except ValidationError as exc:
            logger.error("Failed to decode entity", extra={"model": model.__name__, "error": str(exc)})
            raise UnclassifiedServiceError(MALFORMED_PAYLOAD, {"description": f"Malformed {model.__name__}"}) from exc
