# phasorsense/utils/formatting.py

import math


def format_rounded(value, error):
    """
    Format ``value`` rounded to the first significant figure of ``error``.

    ``format_rounded(0.12345, 0.001)`` gives ``"0.123"``; an error of zero
    returns the plain float representation. Halves are rounded up.
    """
    value = float(value)
    if error == 0:
        return repr(value)
    if not math.isfinite(value):
        return str(value)
    exponent = math.floor(math.log10(abs(error)))
    factor = 10.0 ** exponent
    rounded = math.floor(value / factor + 0.5) * factor
    decimals = max(0, -exponent)
    text = f"{rounded:.{decimals}f}"
    # "-0.000" reads as a sign error in labels
    if float(text) == 0:
        text = text.lstrip("-")
    return text


__all__ = ["format_rounded"]
