"""
Resource quantities as used in the node's capacity (e.g. ``4``, ``8Gi``, ``500m``).

The quantities are kept exactly as they were given: no rounding, no unit
conversion, no re-formatting. The numeric value is only calculated for
comparisons, and it is exact (decimal, not float).

.. seealso::
    https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/quantity/
"""
import decimal
import re
from typing import Any

BINARY_SUFFIXES = {'Ki': 1, 'Mi': 2, 'Gi': 3, 'Ti': 4, 'Pi': 5, 'Ei': 6}
DECIMAL_SUFFIXES = {'n': -9, 'u': -6, 'm': -3, '': 0, 'k': 3, 'M': 6, 'G': 9, 'T': 12, 'P': 15, 'E': 18}

# <sign><digits>[.<digits>][<binary-suffix>|<decimal-suffix>|e<exponent>]
QUANTITY_RE = re.compile(
    r'^(?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+))'
    r'(?:(?P<suffix>Ki|Mi|Gi|Ti|Pi|Ei|n|u|m|k|M|G|T|P|E)|[eE](?P<exponent>[+-]?\d+))?$'
)


class Quantity(str):
    """
    A string-based quantity: it is what it was configured, but also a number.
    """
    __slots__ = ()

    @classmethod
    def parse(cls, text: Any) -> "Quantity":
        if not isinstance(text, (str, int)) or isinstance(text, bool):
            raise ValueError(f"Quantities must be strings or integers, got {text!r}")
        text = str(text).strip()
        if not QUANTITY_RE.match(text):
            raise ValueError(f"Unparseable resource quantity: {text!r}")
        return cls(text)

    @property
    def value(self) -> decimal.Decimal:
        match = QUANTITY_RE.match(self)
        if match is None:  # only if constructed directly, not via parse()
            raise ValueError(f"Unparseable resource quantity: {str(self)!r}")
        number = decimal.Decimal(match.group('number'))
        suffix = match.group('suffix') or ''
        exponent = match.group('exponent')
        if exponent is not None:
            return number.scaleb(int(exponent))
        elif suffix in BINARY_SUFFIXES:
            return number * (1024 ** BINARY_SUFFIXES[suffix])
        else:
            return number.scaleb(DECIMAL_SUFFIXES[suffix])

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({str(self)!r})'
