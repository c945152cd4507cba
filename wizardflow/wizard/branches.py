from typing import Any, Dict, Iterable, Mapping, Optional, Union


class Branch:
    SELECT = "Select"
    SKIP = "Skip"
    DESELECT = "Deselect"

    ALL = [SELECT, SKIP, DESELECT]


Directives = Union[str, Iterable[str], Mapping[str, str]]


def normalize_directives(value: Directives) -> Dict[str, str]:
    """
    Turn the accepted directive shapes into a name -> directive dict.

    "degree"                       -> {"degree": "Select"}
    "degree,remote"                -> both selected
    ["degree", "remote"]           -> both selected
    {"degree": "Skip"}             -> used as-is
    """
    if isinstance(value, str):
        names = [n.strip() for n in value.split(",") if n.strip()]
        return {name: Branch.SELECT for name in names}

    if isinstance(value, Mapping):
        out: Dict[str, str] = {}
        for name, directive in value.items():
            if directive not in Branch.ALL:
                raise ValueError(f"Invalid branch directive for '{name}': {directive!r}")
            out[str(name)] = directive
        return out

    out = {}
    for name in value:
        if not isinstance(name, str):
            raise ValueError(f"Branch names must be strings, got {name!r}")
        out[name] = Branch.SELECT
    return out


def apply_directives(current: Optional[Mapping[str, str]], directives: Directives) -> Dict[str, str]:
    merged = dict(current or {})
    for name, directive in normalize_directives(directives).items():
        if directive == Branch.DESELECT:
            merged.pop(name, None)
        else:
            merged[name] = directive
    return merged


def get_directive(branches: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    if not branches:
        return None
    return branches.get(name)
