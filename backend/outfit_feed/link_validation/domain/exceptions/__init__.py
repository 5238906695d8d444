# Link validation exceptions module
from .validation_exceptions import (
    LinkValidationError,
    MalformedUrlError,
    BlacklistedDomainError,
    NetworkError,
    HttpStatusError,
    UnsupportedContentTypeError,
)

__all__ = [
    'LinkValidationError',
    'MalformedUrlError',
    'BlacklistedDomainError',
    'NetworkError',
    'HttpStatusError',
    'UnsupportedContentTypeError',
]
