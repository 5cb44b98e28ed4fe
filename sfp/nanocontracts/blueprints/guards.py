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

"""Access control and precondition checks shared by the SFP blueprints.

Every mutating method runs its checks before touching state. The checks are
plain functions rather than a base blueprint, so each contract keeps its own
``owner``, ``initialized`` and ``locked`` fields and passes them in.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from hathor import Address, BlueprintId, CallerId, ContractId, NCFail, VertexId

INITIAL_VERSION = "1.0.0"

NULL_ADDRESS = Address(b"\x00" * 25)
NULL_CONTRACT_ID = ContractId(VertexId(b"\x00" * 32))
NULL_BLUEPRINT_ID = BlueprintId(VertexId(b"\x00" * 32))


class SFPError(NCFail):
    """Base error for SFP blueprints."""
    pass


class Unauthorized(SFPError):
    pass


class ZeroAddress(SFPError):
    pass


class ZeroAmount(SFPError):
    pass


class EmptyString(SFPError):
    pass


class AmountExceedsLimit(SFPError):
    """Raised when a single contribution is larger than the pool cap."""
    pass


class AmountExceeds(SFPError):
    """Raised when an amount is larger than the available balance."""
    pass


class AlreadyInitialized(SFPError):
    pass


class NotInitialized(SFPError):
    pass


class NotWhitelisted(SFPError):
    pass


class AllowanceInsufficient(SFPError):
    pass


class FunctionCallError(SFPError):
    """Raised for calls and transfers outside the defined entry points."""
    pass


class InvalidActions(SFPError):
    pass


class InvalidVersion(SFPError):
    pass


class ReentrantCall(SFPError):
    pass


class ProjectNotFound(SFPError):
    pass


def is_null(value: bytes) -> bool:
    """Return True for an all-zero identifier (address, contract or blueprint id)."""
    return not any(value)


def require_owner(caller: CallerId, owner: CallerId) -> None:
    if caller != owner:
        raise Unauthorized("Only owner can call this method")


def require_non_zero_address(value: bytes) -> None:
    if is_null(value):
        raise ZeroAddress("Address cannot be zero")


def require_non_zero_amount(amount: int) -> None:
    if amount <= 0:
        raise ZeroAmount("Amount must be greater than zero")


def require_non_negative_amount(amount: int) -> None:
    if amount < 0:
        raise ZeroAmount("Amount must not be negative")


def require_non_empty(value: str) -> None:
    if len(value) == 0:
        raise EmptyString("String cannot be empty")


def require_within_cap(amount: int, cap: int) -> None:
    if amount > cap:
        raise AmountExceedsLimit(f"Amount {amount} exceeds limit {cap}")


def require_sufficient_balance(amount: int, balance: int) -> None:
    if amount > balance:
        raise AmountExceeds(f"Amount {amount} exceeds available {balance}")


def guard_once(contract: Any) -> None:
    """Flip ``contract.initialized`` from False to True, or fail if already set."""
    if contract.initialized:
        raise AlreadyInitialized("Contract is already initialized")
    contract.initialized = True


def require_initialized(contract: Any) -> None:
    if not contract.initialized:
        raise NotInitialized("Contract is not initialized")


@contextmanager
def nonreentrant(contract: Any) -> Iterator[None]:
    """Hold ``contract.locked`` for the duration of a cross-contract operation."""
    if contract.locked:
        raise ReentrantCall("Reentrant call")
    contract.locked = True
    try:
        yield
    finally:
        contract.locked = False


def is_version_higher(new_version: str, current_version: str) -> bool:
    """Compare semantic versions (e.g., "1.2.3").

    Returns True if new_version > current_version.
    Returns False if either version is malformed or they are equal.
    """
    new_parts = _parse_version(new_version)
    current_parts = _parse_version(current_version)
    if new_parts is None or current_parts is None:
        return False

    # Pad shorter version with zeros
    width = max(len(new_parts), len(current_parts))
    new_parts += [0] * (width - len(new_parts))
    current_parts += [0] * (width - len(current_parts))
    return new_parts > current_parts


def _parse_version(version: str) -> list[int] | None:
    parts: list[int] = []
    for part in version.split("."):
        if not part or not all(c in "0123456789" for c in part):
            return None
        parts.append(int(part))
    return parts
