# errors.py
"""
Failures surfaced to the operator, in pipeline order.

Anything that is only a per-place anomaly (no name, no coordinates)
is logged at debug level by the decoder and never raised.
"""


class PlaceListError(Exception):
    """Base class for every fatal conversion failure."""


class FetchFailed(PlaceListError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f'Failed to download {url}: {reason}')


class ScriptNotFound(PlaceListError):
    def __init__(self):
        super().__init__(
            'Unable to locate the window.APP_INITIALIZATION_STATE script '
            'in the retrieved HTML response.'
        )


class PayloadExtractionFailed(PlaceListError):
    def __init__(self, detail: str = ''):
        message = 'Failed to isolate the APP_INITIALIZATION_STATE JSON payload.'
        if detail:
            message += f' {detail}'
        super().__init__(message)


class PayloadParseFailed(PlaceListError):
    def __init__(self, detail: str):
        super().__init__(
            f'The APP_INITIALIZATION_STATE payload is not valid JSON: {detail}'
        )


class StructureTooDeep(PlaceListError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f'The initialization payload nests deeper than {limit} levels.'
        )


class SignatureNotFound(PlaceListError):
    def __init__(self):
        super().__init__(
            'The payload parsed as JSON but no array carries the place list '
            'share URL. Google most likely changed the payload shape.'
        )


class RequiredFieldMissing(PlaceListError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f'Unable to determine the list {field}.')
