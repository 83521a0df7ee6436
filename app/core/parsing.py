from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


# Thousands separators found in pasted amounts ("1 500 000", "1_500_000").
_SEPARATORS = (" ", "\u00a0", "\u202f", "_")


def parse_decimal(value):
    """
    Convert user input into a Decimal.

    Accepts "1 500 000", "1500000", "12,5" or already typed numbers.
    Returns None for blank input and raises ValueError for anything else
    that is not a number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, (int, Decimal)):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raw = str(value).strip()
        for sep in _SEPARATORS:
            raw = raw.replace(sep, "")
        if not raw:
            return None
        try:
            result = Decimal(raw.replace(",", "."))
        except InvalidOperation as exc:
            raise ValueError(f"{value!r} is not a number") from exc
    if not result.is_finite():
        raise ValueError(f"{value!r} is not a number")
    return result


def parse_amount(value):
    """Whole-franc amount. ValueError when the value has a fractional part."""
    result = parse_decimal(value)
    if result is None:
        return None
    if result != result.to_integral_value():
        raise ValueError(f"{value!r} is not a whole amount")
    return int(result)


def parse_int(value, default=None):
    """Lenient integer: returns ``default`` when the input cannot be read."""
    try:
        result = parse_decimal(value)
    except ValueError:
        return default
    if result is None:
        return default
    return int(result.to_integral_value(rounding=ROUND_HALF_UP))


def as_pk(value):
    """Integer primary key from user input, or None."""
    value = str(value).strip()
    return int(value) if value.isdigit() else None
