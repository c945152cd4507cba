import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .branches import Branch, get_directive
from .errors import WizardConfigError

# JSON spelling of labelled entries:
#   {"__label__": "Your details", "__step__": "job_application"}
#   {"__label__": "Background", "__branches__": {"degree": [...], "nodegree": "experience"}}
LABEL_KEY = "__label__"
STEP_KEY = "__step__"
BRANCHES_KEY = "__branches__"
MARKER_KEYS = (LABEL_KEY, STEP_KEY, BRANCHES_KEY)

# Canonical form after normalize_spec(): a list of (label, value) pairs where
# value is a step id or a dict of branch name -> (step id | canonical list).
BranchGroup = Dict[str, Union[str, List[Tuple[Optional[str], Any]]]]
Entry = Tuple[Optional[str], Union[str, BranchGroup]]

_CAPITAL = re.compile(r"(?<![A-Z])[A-Z]")
_SEPARATORS = re.compile(r"[-_.]")


def humanize(step_id: str) -> str:
    """
    Label for a step that was declared without one.
    "degree_type" -> "Degree Type", "jobApplication" -> "Job Application".
    """
    spaced = _CAPITAL.sub(lambda m: " " + m.group(0), step_id)
    spaced = _SEPARATORS.sub(" ", spaced).lower()
    return " ".join(word.capitalize() for word in spaced.split())


@dataclass
class ResolvedPath:
    steps: List[str] = field(default_factory=list)
    labels: Dict[str, Optional[str]] = field(default_factory=dict)

    def append(self, label: Optional[str], step: str) -> None:
        self.steps.append(step)
        self.labels.setdefault(step, label)

    def index(self, step: Optional[str]) -> int:
        """Position of `step` in the path, -1 if it is not on it."""
        try:
            return self.steps.index(step)
        except ValueError:
            return -1

    def label(self, step: str) -> str:
        label = self.labels.get(step)
        return label if isinstance(label, str) and label else humanize(step)

    def __contains__(self, step: object) -> bool:
        return step in self.labels

    def __iter__(self) -> Iterator[str]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


def _normalize_group(group: Mapping[str, Any]) -> BranchGroup:
    if not group:
        raise WizardConfigError("Branch group must declare at least one branch")
    out: BranchGroup = {}
    for name, value in group.items():
        if not isinstance(name, str) or not name:
            raise WizardConfigError(f"Branch names must be non-empty strings, got {name!r}")
        if isinstance(value, str):
            out[name] = value
        elif isinstance(value, (list, tuple)):
            out[name] = normalize_spec(value)
        else:
            raise WizardConfigError(f"Branch '{name}' must point to a step id or a steps list")
    return out


def _normalize_entry(entry: Any) -> Entry:
    if isinstance(entry, str):
        return None, entry

    if isinstance(entry, tuple):
        if len(entry) != 2 or not (entry[0] is None or isinstance(entry[0], str)):
            raise WizardConfigError(f"Labelled entries must be (label, step) pairs, got {entry!r}")
        label, value = entry
        if isinstance(value, str):
            return label, value
        if isinstance(value, Mapping):
            return label, _normalize_group(value)
        raise WizardConfigError(f"Invalid labelled entry: {entry!r}")

    if isinstance(entry, Mapping):
        if any(k in entry for k in MARKER_KEYS):
            label = entry.get(LABEL_KEY)
            if STEP_KEY in entry:
                return label, str(entry[STEP_KEY])
            if BRANCHES_KEY in entry:
                return label, _normalize_group(entry[BRANCHES_KEY])
            raise WizardConfigError(f"Entry {entry!r} needs '{STEP_KEY}' or '{BRANCHES_KEY}'")
        return None, _normalize_group(entry)

    raise WizardConfigError(f"Unsupported step entry: {entry!r}")


def normalize_spec(spec: Any) -> List[Entry]:
    if isinstance(spec, str):
        spec = [spec]
    if not isinstance(spec, (list, tuple)):
        raise WizardConfigError(f"Steps must be a list, got {type(spec).__name__}")
    return [_normalize_entry(entry) for entry in spec]


def _choose_branch(group: BranchGroup, directives: Optional[Mapping[str, str]],
                   default_branch: bool) -> Optional[str]:
    chosen = None
    for name in group:
        directive = get_directive(directives, name)
        if directive == Branch.SELECT:
            return name
        if chosen is None and default_branch and directive != Branch.SKIP:
            chosen = name
    return chosen


def _resolve_into(path: ResolvedPath, entries: List[Entry],
                  directives: Optional[Mapping[str, str]], default_branch: bool) -> None:
    for label, value in entries:
        if isinstance(value, str):
            path.append(label, value)
            continue

        name = _choose_branch(value, directives, default_branch)
        if name is None:
            continue
        chosen = value[name]
        if isinstance(chosen, str):
            path.append(label, chosen)
        else:
            _resolve_into(path, chosen, directives, default_branch)


def resolve(spec: Any, directives: Optional[Mapping[str, str]] = None,
            default_branch: bool = True) -> ResolvedPath:
    """Flatten a step spec into the ordered steps to take."""
    path = ResolvedPath()
    _resolve_into(path, normalize_spec(spec), directives, default_branch)
    return path


class StepTree:
    def __init__(self, spec: Any):
        self.spec = normalize_spec(spec)

    @classmethod
    def from_json_file(cls, path: str) -> "StepTree":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(data)

    def resolve(self, directives: Optional[Mapping[str, str]] = None,
                default_branch: bool = True) -> ResolvedPath:
        path = ResolvedPath()
        _resolve_into(path, self.spec, directives, default_branch)
        return path

    def branch_names(self) -> List[str]:
        names: List[str] = []

        def walk(entries: List[Entry]) -> None:
            for _, value in entries:
                if isinstance(value, str):
                    continue
                for name, chosen in value.items():
                    if name not in names:
                        names.append(name)
                    if not isinstance(chosen, str):
                        walk(chosen)

        walk(self.spec)
        return names
