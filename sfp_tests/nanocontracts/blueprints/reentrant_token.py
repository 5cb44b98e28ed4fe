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

"""Hostile token whose transfer_from calls back into the pool that invoked it."""

from hathor import Amount, Blueprint, CallerId, Context, ContractId, export, public, view


@export
class ReentrantToken(Blueprint):
    target: ContractId

    @public
    def initialize(self, ctx: Context, target: ContractId) -> None:
        self.target = target

    @public
    def transfer_from(self, ctx: Context, owner: CallerId, to: CallerId, amount: Amount) -> None:
        self.syscall.get_contract(self.target, blueprint_id=None).public().contribute_token(
            self.syscall.get_contract_id(),
            amount,
        )

    @view
    def balance_of(self, account: CallerId) -> Amount:
        return Amount(0)
