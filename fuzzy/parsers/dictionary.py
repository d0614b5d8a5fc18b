"""Dictionary loading.

A dictionary file holds a ``data`` list of ``{id, description, values}``
entries. Several files (or directories of files) are merged in the order
given; files inside a directory are read in sorted name order so the
merged entry order is reproducible.
"""

from os import path, listdir
from typing import Any, Iterable, List

import yaml

from fuzzy.core.errors import InputError
from fuzzy.core.models import DictionaryEntry, FuzzDictionary

DICTIONARY_EXTENSIONS = (".yml", ".yaml", ".json")


def parse_dictionary(data: Any, source: str | None = None) -> FuzzDictionary:
    if not isinstance(data, dict) or not isinstance(data.get("data"), list):
        raise InputError("dictionary must be a mapping with a 'data' list", source)

    entries: List[DictionaryEntry] = []
    for i, raw in enumerate(data["data"]):
        where = f"data[{i}]"
        if not isinstance(raw, dict):
            raise InputError(f"{where}: must be a mapping", source)
        if raw.get("id") is None:
            raise InputError(f"{where}: missing required field 'id'", source)
        values = raw.get("values")
        if not isinstance(values, list) or not values:
            raise InputError(f"{where}: 'values' must be a non-empty list", source)
        entries.append(DictionaryEntry(
            id=str(raw["id"]),
            description=str(raw.get("description") or ""),
            values=tuple("" if v is None else str(v) for v in values),
        ))
    return FuzzDictionary(tuple(entries))


def load_dictionary_file(filename: str) -> FuzzDictionary:
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise InputError(f"cannot read dictionary: {exc}", filename) from exc
    except yaml.YAMLError as exc:
        raise InputError(f"invalid dictionary file: {exc}", filename) from exc
    return parse_dictionary(data, filename)


def dictionary_files(location: str) -> List[str]:
    if path.isdir(location):
        return [path.join(location, name) for name in sorted(listdir(location))
                if name.lower().endswith(DICTIONARY_EXTENSIONS)
                and path.isfile(path.join(location, name))]
    if path.isfile(location):
        return [location]
    raise InputError("no such dictionary file or directory", location)


def load_dictionaries(locations: Iterable[str], logger=None) -> FuzzDictionary:
    merged = FuzzDictionary()
    for location in locations:
        for filename in dictionary_files(location):
            loaded = load_dictionary_file(filename)
            if logger:
                logger.debug(f"Loaded {len(loaded.entries)} entries from {filename}")
            merged = merged.merge(loaded)
    if not merged.entries:
        raise InputError("no dictionary entries loaded")
    return merged
