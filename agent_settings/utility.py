from typing import Any, Iterator, Mapping, get_origin

from pydantic import BaseModel


def deep_merge(a: Mapping[str, Any], b: Mapping[str, Any]) -> Mapping[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out[k], Mapping) and isinstance(v, Mapping):
            out[k] = deep_merge(out[k], v)
        else:
            # lists and scalars are replaced wholesale
            out[k] = v
    return out


def iter_leaves(
    tree: Mapping[str, Any], *, _prefix: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], Any]]:
    """
    Yield ``(path, value)`` for every non-mapping value in ``tree``.

    Lists, scalars and None count as a single leaf; empty mappings yield nothing.
    """
    for key, value in tree.items():
        path = _prefix + (str(key),)
        if isinstance(value, Mapping):
            yield from iter_leaves(value, _prefix=path)
        else:
            yield path, value


def schema_leaf_paths(model: type[BaseModel], *, _prefix: tuple[str, ...] = ()) -> list[str]:
    """Dotted paths of every non-model field of ``model``, nested models expanded."""
    paths: list[str] = []
    for name, field in model.model_fields.items():
        path = _prefix + (name,)
        annotation = field.annotation
        if (
            get_origin(annotation) is None
            and isinstance(annotation, type)
            and issubclass(annotation, BaseModel)
        ):
            paths.extend(schema_leaf_paths(annotation, _prefix=path))
        else:
            paths.append(".".join(path))
    return paths

