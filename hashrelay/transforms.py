"""
Per-record transform and the digit-prefix filter applied by workers.

The transform is a replaceable black box: any callable taking a Record and
returning a string (or a coroutine function resolving to one) can be handed
to the pipeline. ``password_hash`` is the default.
"""

import base64
from collections.abc import Awaitable, Callable

from hashrelay.scheme import Record

Transform = Callable[[Record], str | Awaitable[str]]

_ASCII_DIGITS = frozenset("0123456789")


def password_hash(record: Record) -> str:
    """
    Default transform: base64 of the password followed by ``passes + salt``.

    Padding characters are stripped from the encoded value.

    Example:
        >>> password_hash(Record(password="a", passes=1, salt=1))
        'YTI'
    """
    text = record.password + str(record.passes + record.salt)
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return encoded.replace("=", "")


def is_rejected(value: str) -> bool:
    """
    Check whether a transformed value is filtered out.

    A value is rejected when its first character is an ASCII decimal digit.
    An empty value has no first character and is therefore kept.
    """
    return bool(value) and value[0] in _ASCII_DIGITS
