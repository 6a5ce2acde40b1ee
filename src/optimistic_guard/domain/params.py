from typing import Optional


def tokenize_param_names(raw: Optional[str]) -> list[str]:
    """
    Split a comma-separated member value into parameter names.

    Order and duplicates are preserved and nothing is checked against the
    request parameters; unknown names surface as None entries at run time.
    A missing or blank value yields no names.
    """
    if raw is None or not raw.strip():
        return []
    return [token.strip() for token in raw.split(",")]
