"""Human-readable differences between strings and between objects."""

from __future__ import annotations

import dataclasses
import json
import pprint
from dataclasses import dataclass
from typing import Any

from kubeutil.field import Path, new_path


def string_diff(a: str, b: str) -> str:
    """Return the common prefix of a and b followed by what remains of each."""
    common = 0
    for char_a, char_b in zip(a, b):
        if char_a != char_b:
            break
        common += 1
    return f"{a[:common]}\n\nA: {a[common:]}\n\nB: {b[common:]}\n\n"


def object_diff(a: Any, b: Any) -> str:
    """Serialize both objects to JSON and diff the resulting strings.

    Raises TypeError if either object cannot be serialized.
    """
    try:
        json_a = json.dumps(a, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"a: {exc}") from exc
    try:
        json_b = json.dumps(b, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"b: {exc}") from exc
    return string_diff(json_a, json_b)


def object_print_diff(a: Any, b: Any) -> str:
    """Diff the full printed representations of two objects."""
    return string_diff(repr(a), repr(b))


@dataclass
class _Diff:
    path: Path
    a: Any
    b: Any


def _is_struct(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _deep_equal(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(_deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(_deep_equal(a[k], b[k]) for k in a)
    if _is_struct(a):
        return all(
            _deep_equal(getattr(a, f.name), getattr(b, f.name))
            for f in dataclasses.fields(a)
        )
    return a == b


def _reflect_diff(path: Path, a: Any, b: Any) -> list[_Diff]:
    if a is None or b is None:
        if a is None and b is None:
            return []
        return [_Diff(path, a, b)]

    if type(a) is not type(b):
        return [_Diff(path, a, b)]

    if _is_struct(a):
        changes: list[_Diff] = []
        for field in dataclasses.fields(a):
            if field.name.startswith("_"):
                if _deep_equal(a, b):
                    continue
                return [_Diff(path, repr(a), repr(b))]
            changes.extend(
                _reflect_diff(
                    path.child(field.name), getattr(a, field.name), getattr(b, field.name)
                )
            )
        return changes

    if isinstance(a, (list, tuple)):
        common = min(len(a), len(b))
        diffs: list[_Diff] = []
        for i, (item_a, item_b) in enumerate(zip(a, b)):
            if not _deep_equal(item_a, item_b):
                diffs.extend(_reflect_diff(path.index(i), item_a, item_b))
        diffs.extend(_Diff(path.index(i), a[i], None) for i in range(common, len(a)))
        diffs.extend(_Diff(path.index(i), None, b[i]) for i in range(common, len(b)))
        return diffs

    if isinstance(a, dict):
        if _deep_equal(a, b):
            return []
        remaining = dict(a)
        missing: list[_Diff] = []
        for key, value_b in b.items():
            if key in remaining:
                value_a = remaining.pop(key)
                if _deep_equal(value_a, value_b):
                    continue
                missing.extend(_reflect_diff(path.key(str(key)), value_a, value_b))
                continue
            missing.append(_Diff(path.key(str(key)), None, value_b))
        missing.extend(_Diff(path.key(str(key)), value, None) for key, value in remaining.items())
        if not missing:
            missing.append(_Diff(path, a, b))
        missing.sort(key=lambda d: str(d.path))
        return missing

    if _deep_equal(a, b):
        return []
    return [_Diff(path, a, b)]


def object_reflect_diff(a: Any, b: Any) -> str:
    """Return a field-by-field diff of two objects computed by inspection."""
    if a is not None and b is not None and type(a) is not type(b):
        return f"type A {type(a).__name__} and type B {type(b).__name__} do not match"
    diffs = _reflect_diff(new_path("object"), a, b)
    if not diffs:
        return "<no diffs>"
    out = [""]
    for d in diffs:
        elided_a, elided_b = limit(d.a, d.b, 80)
        out.extend([f"{d.path}:", f"  a: {elided_a}", f"  b: {elided_b}"])
    return "\n".join(out)


def limit(a_obj: Any, b_obj: Any, max_len: int) -> tuple[str, str]:
    """Render two objects, eliding shared prefixes and overlong tails.

    Identical leading text is dropped two characters at a time while either
    rendering is too long; whatever is still too long is then cut at max_len.
    """
    elided_prefix = ""
    elided_a_suffix = ""
    elided_b_suffix = ""
    a, b = repr(a_obj), repr(b_obj)

    if a_obj is not None and b_obj is not None:
        type_a, type_b = type(a_obj).__name__, type(b_obj).__name__
        if type_a != type_b:
            a = f"{a} ({type_a})"
            b = f"{b} ({type_b})"

    while True:
        shared_start = len(a) > 4 and len(b) > 4 and a[:4] == b[:4]
        if (len(a) > max_len or len(b) > max_len) and shared_start:
            elided_prefix = "..."
            a = a[2:]
            b = b[2:]
        elif len(a) > max_len:
            a = a[:max_len]
            elided_a_suffix = "..."
        elif len(b) > max_len:
            b = b[:max_len]
            elided_b_suffix = "..."
        else:
            return elided_prefix + a + elided_a_suffix, elided_prefix + b + elided_b_suffix


def object_print_side_by_side(a: Any, b: Any) -> str:
    """Print dumps of a and b side by side, one column each."""
    lines_a = (pprint.pformat(a, indent=1) + "\n").split("\n")
    lines_b = (pprint.pformat(b, indent=1) + "\n").split("\n")
    width = max(len(line) for line in lines_a + lines_b)
    column = max(width, max(len(line) for line in lines_a) + 1)
    rows = max(len(lines_a), len(lines_b))
    lines_a += [""] * (rows - len(lines_a))
    lines_b += [""] * (rows - len(lines_b))
    return "".join(f"{left.ljust(column)}{right}\n" for left, right in zip(lines_a, lines_b))