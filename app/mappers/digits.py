ARABIC_INDIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"
LATIN_DIGITS = "0123456789"

_DIGIT_TABLE = str.maketrans(ARABIC_INDIC_DIGITS, LATIN_DIGITS)


def normalize_digits(text: str) -> str:
    """Replace Arabic-Indic digits with Latin ones, leaving everything else as is.

    Mixed tokens such as ``٠1٢3`` are converted character by character.
    """
    return text.translate(_DIGIT_TABLE)
