"""Canonical identifier minting.

Products and suppliers are keyed by a fixed prefix plus a zero-padded
numeral taken from caller input:

  {prefix}{fragment:0>width}

Defaults:
  product:   BYNPD00042   (prefix "BYNPD", width 5)
  supplier:  BYNSP00007   (prefix "BYNSP", width 5)

Padding never truncates, so a fragment wider than `width` is kept whole
("123456" → "BYNPD123456"). Leading zeros supplied by the caller are kept
too ("007" → "BYNPD00007"). There is no counter here: uniqueness is the
storage unique index's job.
"""

import re

from app.config import settings
from app.middleware.exceptions import InvalidIdentifierFragmentError

_DIGITS = re.compile(r"\d+", re.ASCII)


def mint_identifier(
    prefix: str,
    raw_fragment: str | int,
    width: int = 5,
    field: str = "identifier",
) -> str:
    """Build a canonical identifier from a raw numeric fragment.

    Args:
        prefix: Fixed entity prefix, e.g. "BYNPD"
        raw_fragment: Caller-supplied numeral (str or int), trimmed first
        width: Minimum numeral width after zero-padding
        field: Input field name reported on rejection

    Raises:
        InvalidIdentifierFragmentError: fragment is empty or not all digits
    """
    if isinstance(raw_fragment, bool) or not isinstance(raw_fragment, (str, int)):
        raise InvalidIdentifierFragmentError(field, raw_fragment)

    fragment = str(raw_fragment).strip()
    if not _DIGITS.fullmatch(fragment):
        raise InvalidIdentifierFragmentError(field, raw_fragment)

    return f"{prefix}{fragment.zfill(width)}"


def mint_product_id(raw_fragment: str | int) -> str:
    return mint_identifier(
        settings.product_id_prefix,
        raw_fragment,
        width=settings.identifier_width,
        field="productId",
    )


def mint_supplier_id(raw_fragment: str | int) -> str:
    return mint_identifier(
        settings.supplier_id_prefix,
        raw_fragment,
        width=settings.identifier_width,
        field="supplierId",
    )


def is_canonical(prefix: str, identifier: str, width: int = 5) -> bool:
    """True when `identifier` is `prefix` followed by at least `width` digits."""
    if not identifier.startswith(prefix):
        return False
    numeral = identifier[len(prefix):]
    return len(numeral) >= width and _DIGITS.fullmatch(numeral) is not None
