import typing as t
from collections.abc import Mapping

KT = t.TypeVar("KT")
VT = t.TypeVar("VT")
RecursiveMapping = VT | Mapping[KT, "RecursiveMapping[KT, VT]"]


def deep_update(
    d1: dict[KT, RecursiveMapping[KT, VT]], d2: Mapping[KT, RecursiveMapping[KT, VT]]
) -> dict[KT, RecursiveMapping[KT, VT]]:
    result = d1.copy()
    for k, v in d2.items():
        if isinstance(v, Mapping) and k in result and isinstance(result[k], Mapping):
            result[k] = deep_update(result[k], v)  # type: ignore
        else:
            result[k] = v
    return result


def parse_override(override: t.Iterable[str], loads: t.Callable[[str], t.Any]) -> dict[str, t.Any]:
    """Expand ``a.b.c=value`` pairs into a nested mapping, decoding each value with ``loads``."""
    od: dict[str, t.Any] = {}
    for o in override:
        if "=" not in o:
            raise ValueError(f"override must have the form key.path=value: {o!r}")
        k, v = [s.strip() for s in o.split("=", 1)]

        target = od
        path = k.split(".")
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = loads(v)
    return od
