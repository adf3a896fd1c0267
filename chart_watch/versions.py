"""
Semantic version helpers for chart versions and constraints

Constraints follow the node-semver / Helm range syntax:
partial versions are x-ranges ("6.7" is ">=6.7.0 <6.8.0"), plus
comparators, tilde, caret and hyphen ranges. Comparators separated by
spaces or commas must all hold, "||" separates alternatives.
Versions are ordered by SemVer 2.0 precedence.
"""

import operator
import re
from typing import Iterable, List, Optional, Tuple

from semver import Version

from .exceptions import InvalidConstraint

_PARTIAL = re.compile(
    r"^[vV=]?\s*"
    r"(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR = re.compile(r"^(?P<op>>=|<=|!=|==|~>|>|<|=|~|\^)?(?P<operand>.*)$")
_HYPHEN = re.compile(r"^\s*(?P<low>\S+)\s+-\s+(?P<high>\S+)\s*$")
_OP_SPACE = re.compile(r"(>=|<=|!=|==|~>|>|<|=|~|\^)\s+")

_OPERATORS: dict = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

Comparator = Tuple[str, Version]
Partial = Tuple[Optional[int], Optional[int], Optional[int], Optional[str]]


def parse_version(v: str) -> Optional[Version]:
    """Parse a chart version string, returning None on failure."""
    if not isinstance(v, str):
        return None
    match = _PARTIAL.match(v.strip())
    if match is None or None in (match.group("minor"), match.group("patch")):
        return None
    major, minor, patch, pre = _partial(match)
    if None in (major, minor, patch):
        return None
    try:
        return _version(major, minor, patch, pre)
    except InvalidConstraint:
        return None


def is_prerelease(v: str) -> bool:
    """Return True if v is a version carrying a pre-release qualifier (e.g. 1.0.0-rc.1)."""
    if not isinstance(v, str):
        return False
    match = _PARTIAL.match(v.strip())
    return bool(match and match.group("pre"))


def latest_version(versions: Iterable[str], prerelease: bool = True) -> Optional[str]:
    """Return the highest of versions, optionally ignoring pre-releases.

    Unparseable versions are skipped. Returns None when nothing is left.
    """
    best: Optional[Tuple[Version, str]] = None
    for v in versions:
        parsed = parse_version(v)
        if parsed is None:
            continue
        if not prerelease and is_prerelease(v):
            continue
        if best is None or parsed > best[0]:
            best = (parsed, v)
    return best[1] if best else None


def satisfies(version: str, constraint: str) -> bool:
    """Return True if version satisfies the range constraint.

    Raises:
        InvalidConstraint: constraint is not a valid range
    """
    comparator_sets = parse_constraint(constraint)
    parsed = parse_version(version)
    if parsed is None:
        return False
    return any(_test_set(parsed, comparators) for comparators in comparator_sets)


def parse_constraint(constraint: str) -> List[List[Comparator]]:
    """Expand a range constraint into alternatives of comparator lists."""
    if not isinstance(constraint, str):
        raise InvalidConstraint(f"Version constraint must be a string, got {constraint!r}")
    alternatives = []
    for alternative in constraint.split("||"):
        hyphen = _HYPHEN.match(alternative)
        if hyphen:
            alternatives.append(
                _expand(">=", hyphen.group("low")) + _expand("<=", hyphen.group("high"))
            )
            continue
        tokens = _OP_SPACE.sub(r"\1", alternative.replace(",", " ")).split()
        comparators: List[Comparator] = []
        for token in tokens:
            match = _COMPARATOR.match(token)
            comparators.extend(_expand(match.group("op") or "", match.group("operand")))
        alternatives.append(comparators)
    return alternatives


def _test_set(version: Version, comparators: List[Comparator]) -> bool:
    if not all(_OPERATORS[op](version, bound) for op, bound in comparators):
        return False
    if not version.prerelease:
        return True
    # pre-releases only match a comparator on the same major.minor.patch
    return any(
        bound.prerelease and _release(bound) == _release(version)
        for _, bound in comparators
    )


def _partial(match: "re.Match") -> Partial:
    parts = []
    for name in ("major", "minor", "patch"):
        value = match.group(name)
        parts.append(None if value is None or value in "xX*" else int(value))
    major, minor, patch = parts
    # "1.x.3" is read as "1.x"
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None
    return major, minor, patch, match.group("pre")


def _version(major: int, minor: int, patch: int, pre: Optional[str] = None) -> Version:
    text = f"{major}.{minor}.{patch}" + (f"-{pre}" if pre else "")
    try:
        return Version.parse(text)
    except ValueError as err:
        raise InvalidConstraint(f"Unsupported version '{text}'") from err


def _release(version: Version) -> Tuple[int, int, int]:
    return version.major, version.minor, version.patch


def _expand(op: str, operand: str) -> List[Comparator]:
    operand = operand.strip()
    if operand in ("", "*", "x", "X"):
        if op in (">", "<", "!="):
            return [("<", _version(0, 0, 0))]
        return []
    match = _PARTIAL.match(operand)
    if match is None:
        raise InvalidConstraint(f"Invalid version constraint '{op}{operand}'")
    major, minor, patch, pre = _partial(match)
    handler = _EXPANSIONS.get(op)
    if handler is None:
        raise InvalidConstraint(f"Unsupported operator '{op}'")
    return handler(major, minor, patch, pre)


def _exact(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return []
    if minor is None:
        return [(">=", _version(major, 0, 0)), ("<", _version(major + 1, 0, 0))]
    if patch is None:
        return [(">=", _version(major, minor, 0)), ("<", _version(major, minor + 1, 0))]
    return [("==", _version(major, minor, patch, pre))]


def _not_equal(major, minor, patch, pre) -> List[Comparator]:
    if None in (major, minor, patch):
        raise InvalidConstraint("'!=' requires a full version")
    return [("!=", _version(major, minor, patch, pre))]


def _greater(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return [("<", _version(0, 0, 0))]
    if minor is None:
        return [(">=", _version(major + 1, 0, 0))]
    if patch is None:
        return [(">=", _version(major, minor + 1, 0))]
    return [(">", _version(major, minor, patch, pre))]


def _greater_equal(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return []
    return [(">=", _version(major, minor or 0, patch or 0, pre))]


def _less(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return [("<", _version(0, 0, 0))]
    return [("<", _version(major, minor or 0, patch or 0, pre))]


def _less_equal(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return []
    if minor is None:
        return [("<", _version(major + 1, 0, 0))]
    if patch is None:
        return [("<", _version(major, minor + 1, 0))]
    return [("<=", _version(major, minor, patch, pre))]


def _tilde(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return []
    if minor is None:
        return [(">=", _version(major, 0, 0)), ("<", _version(major + 1, 0, 0))]
    return [
        (">=", _version(major, minor, patch or 0, pre)),
        ("<", _version(major, minor + 1, 0)),
    ]


def _caret(major, minor, patch, pre) -> List[Comparator]:
    if major is None:
        return []
    lower = (">=", _version(major, minor or 0, patch or 0, pre))
    if major > 0 or minor is None:
        upper = _version(major + 1, 0, 0)
    elif minor > 0 or patch is None:
        upper = _version(0, minor + 1, 0)
    else:
        upper = _version(0, 0, patch + 1)
    return [lower, ("<", upper)]


_EXPANSIONS: dict = {
    "": _exact,
    "=": _exact,
    "==": _exact,
    "!=": _not_equal,
    ">": _greater,
    ">=": _greater_equal,
    "<": _less,
    "<=": _less_equal,
    "~": _tilde,
    "~>": _tilde,
    "^": _caret,
}

