# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Encoding of the records emitted by the SFP blueprints.

A record is a tuple ``(name, *fields)`` where every field is an ``int``, a
``bool``, a ``str`` or raw ``bytes`` (identifiers). It is stored in the
transaction's nano event as the UTF-8 ``repr`` of that tuple, which
``decode_event`` turns back into the same tuple. The encoding is Python
literal syntax, so only Python readers (``ast.literal_eval``) can decode it.
"""

from ast import literal_eval
from typing import Any, Union

EventField = Union[int, bool, str, bytes]
EventRecord = tuple[Any, ...]


def _normalize(value: EventField) -> EventField:
    # Address/ContractId/Amount are thin wrappers; keep only the builtin value.
    if isinstance(value, bool):
        return value
    if isinstance(value, bytes):
        return bytes(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        return str(value)
    raise TypeError(f"Unsupported event field type: {type(value).__name__}")


def make_record(name: str, *fields: EventField) -> EventRecord:
    return (name, *(_normalize(field) for field in fields))


def encode_event(name: str, *fields: EventField) -> bytes:
    return repr(make_record(name, *fields)).encode("utf-8")


def decode_event(data: bytes) -> EventRecord:
    record = literal_eval(data.decode("utf-8"))
    if not isinstance(record, tuple) or not record or not isinstance(record[0], str):
        raise ValueError("Malformed event record")
    return record


def emit(contract: Any, name: str, *fields: EventField) -> None:
    """Emit a record from inside a blueprint method and log it."""
    data = encode_event(name, *fields)
    contract.syscall.emit_event(data)
    contract.log.info(f"{name} emitted", record=data.decode("utf-8"))
