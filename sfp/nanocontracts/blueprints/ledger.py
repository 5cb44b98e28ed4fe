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

"""Fungible balance ledger shared by GovernanceToken and ProjectPool.

The functions operate on any blueprint declaring these fields:

    balances: dict[CallerId, Amount]
    allowances: dict[tuple[CallerId, CallerId], Amount]
    total_supply: Amount

Callers are responsible for authorization; the functions only enforce the
ledger rules (no zero recipients, no negative balances, allowance spending).
"""

from typing import Any

from hathor import Amount, CallerId

from sfp.nanocontracts.blueprints.events import emit
from sfp.nanocontracts.blueprints.guards import (
    NULL_ADDRESS,
    AllowanceInsufficient,
    require_non_negative_amount,
    require_non_zero_address,
    require_non_zero_amount,
    require_sufficient_balance,
)


def balance_of(contract: Any, account: CallerId) -> Amount:
    return contract.balances.get(account, Amount(0))


def allowance_of(contract: Any, owner: CallerId, spender: CallerId) -> Amount:
    return contract.allowances.get((owner, spender), Amount(0))


def mint(contract: Any, to: CallerId, amount: Amount) -> None:
    require_non_zero_address(to)
    require_non_zero_amount(amount)

    contract.balances[to] = Amount(balance_of(contract, to) + amount)
    contract.total_supply = Amount(contract.total_supply + amount)
    emit(contract, "Transfer", NULL_ADDRESS, to, amount)


def burn(contract: Any, account: CallerId, amount: Amount) -> None:
    require_non_zero_address(account)
    require_non_zero_amount(amount)
    balance = balance_of(contract, account)
    require_sufficient_balance(amount, balance)

    contract.balances[account] = Amount(balance - amount)
    contract.total_supply = Amount(contract.total_supply - amount)
    emit(contract, "Transfer", account, NULL_ADDRESS, amount)


def transfer(contract: Any, sender: CallerId, to: CallerId, amount: Amount) -> None:
    require_non_zero_address(sender)
    require_non_zero_address(to)
    require_non_negative_amount(amount)
    sender_balance = balance_of(contract, sender)
    require_sufficient_balance(amount, sender_balance)

    contract.balances[sender] = Amount(sender_balance - amount)
    contract.balances[to] = Amount(balance_of(contract, to) + amount)
    emit(contract, "Transfer", sender, to, amount)


def approve(contract: Any, owner: CallerId, spender: CallerId, amount: Amount) -> None:
    require_non_zero_address(spender)
    require_non_negative_amount(amount)
    contract.allowances[(owner, spender)] = amount
    emit(contract, "Approval", owner, spender, amount)


def transfer_from(
    contract: Any,
    spender: CallerId,
    owner: CallerId,
    to: CallerId,
    amount: Amount,
) -> None:
    """Move ``amount`` from ``owner`` to ``to`` on behalf of ``spender``."""
    require_non_negative_amount(amount)
    current = allowance_of(contract, owner, spender)
    if amount > current:
        raise AllowanceInsufficient(f"Allowance {current} is lower than {amount}")
    require_non_zero_address(to)
    require_sufficient_balance(amount, balance_of(contract, owner))

    contract.allowances[(owner, spender)] = Amount(current - amount)
    transfer(contract, owner, to, amount)
