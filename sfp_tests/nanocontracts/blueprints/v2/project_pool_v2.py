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

from typing import NamedTuple

from hathor import (
    Address,
    Amount,
    Blueprint,
    BlueprintId,
    CallerId,
    Context,
    ContractId,
    NCArgs,
    export,
    fallback,
    public,
    view,
)

from sfp.nanocontracts.blueprints import ledger
from sfp.nanocontracts.blueprints.events import emit
from sfp.nanocontracts.blueprints.guards import (
    NULL_ADDRESS,
    NULL_CONTRACT_ID,
    FunctionCallError,
    InvalidVersion,
    Unauthorized,
    guard_once,
    is_version_higher,
    nonreentrant,
    require_initialized,
    require_non_empty,
    require_non_zero_address,
    require_non_zero_amount,
    require_owner,
    require_within_cap,
)


class PoolInfo(NamedTuple):
    project_name: str
    token_name: str
    token_symbol: str
    cap: int
    beneficiary: str
    owner: str
    factory_id: str
    total_supply: int
    initialized: bool
    contract_version: str


@export
class ProjectPoolV2(Blueprint):
    """ProjectPool V2 - used to test upgrades.

    Keeps every V1 field and adds:
    - migrated flag set by migrate_v1_to_v2()
    - get_contribution_limit() view
    """

    cap: Amount
    project_name: str
    token_name: str
    token_symbol: str
    beneficiary: CallerId
    factory_id: ContractId

    balances: dict[CallerId, Amount]
    allowances: dict[tuple[CallerId, CallerId], Amount]
    total_supply: Amount

    native_forwarded: Amount
    total_native_contributed: Amount
    total_token_contributed: dict[ContractId, Amount]
    contributions_count: int

    owner: CallerId
    initialized: bool
    locked: bool

    contract_version: str

    # V2 field
    migrated: bool

    def _only_owner_or_factory(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner and ctx.caller_id != self.factory_id:
            raise Unauthorized("Only owner or factory can call this method")

    @public
    def initialize(self, ctx: Context) -> None:
        self.cap = Amount(0)
        self.project_name = ""
        self.token_name = ""
        self.token_symbol = ""
        self.beneficiary = NULL_ADDRESS
        self.factory_id = NULL_CONTRACT_ID
        self.balances = {}
        self.allowances = {}
        self.total_supply = Amount(0)
        self.native_forwarded = Amount(0)
        self.total_native_contributed = Amount(0)
        self.total_token_contributed = {}
        self.contributions_count = 0
        self.owner = NULL_ADDRESS
        self.initialized = False
        self.locked = False
        self.contract_version = "2.0.0"
        self.migrated = True

    @public
    def setup(
        self,
        ctx: Context,
        cap: Amount,
        project_name: str,
        token_name: str,
        token_symbol: str,
        beneficiary: CallerId,
    ) -> None:
        guard_once(self)
        require_non_zero_amount(cap)
        require_non_empty(project_name)
        require_non_empty(token_name)
        require_non_empty(token_symbol)
        require_non_zero_address(beneficiary)

        self.cap = cap
        self.project_name = project_name
        self.token_name = token_name
        self.token_symbol = token_symbol
        self.beneficiary = beneficiary
        self.owner = beneficiary
        if not isinstance(ctx.caller_id, Address):
            self.factory_id = ContractId(ctx.caller_id)
        emit(self, "Initialized", cap, project_name, token_name, token_symbol, beneficiary)

    @public
    def migrate_v1_to_v2(self, ctx: Context) -> None:
        """Migration method to initialize V2 fields after upgrade from V1."""
        require_initialized(self)
        self._only_owner_or_factory(ctx)
        self.migrated = True

    @public
    def contribute_token(self, ctx: Context, token_id: ContractId, amount: Amount) -> None:
        require_initialized(self)
        require_non_zero_address(token_id)
        require_non_zero_amount(amount)
        require_within_cap(amount, self.cap)

        with nonreentrant(self):
            token = self.syscall.get_contract(token_id, blueprint_id=None)
            token.public().transfer_from(ctx.caller_id, self.beneficiary, amount)
            self.total_token_contributed[token_id] = Amount(
                self.total_token_contributed.get(token_id, Amount(0)) + amount
            )
            self.contributions_count += 1
            emit(self, "ContributedERC20", ctx.caller_id, token_id, amount)

    @public
    def mint(self, ctx: Context, to: CallerId, amount: Amount) -> None:
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        ledger.mint(self, to, amount)
        emit(self, "Minted", to, amount)

    @public
    def transfer(self, ctx: Context, to: CallerId, amount: Amount) -> None:
        require_initialized(self)
        ledger.transfer(self, ctx.caller_id, to, amount)

    @public
    def upgrade_contract(self, ctx: Context, new_blueprint_id: BlueprintId, new_version: str) -> None:
        require_initialized(self)
        self._only_owner_or_factory(ctx)
        if not is_version_higher(new_version, self.contract_version):
            raise InvalidVersion(f"New version {new_version} must be higher than current {self.contract_version}")

        self.contract_version = new_version
        self.syscall.change_blueprint(new_blueprint_id)

    @fallback(allow_deposit=True)
    def fallback(self, ctx: Context, method_name: str, nc_args: NCArgs) -> None:
        raise FunctionCallError(f"Unknown method: {method_name!r}")

    @view
    def get_migration_status(self) -> bool:
        # Handle case where field doesn't exist yet (pre-migration)
        try:
            return self.migrated
        except (KeyError, AttributeError):
            return False

    @view
    def get_contribution_limit(self) -> Amount:
        return self.cap

    @view
    def balance_of(self, account: CallerId) -> Amount:
        return ledger.balance_of(self, account)

    @view
    def get_total_supply(self) -> Amount:
        return self.total_supply

    @view
    def get_owner(self) -> CallerId:
        return self.owner

    @view
    def get_contract_version(self) -> str:
        return self.contract_version

    @view
    def get_pool_info(self) -> PoolInfo:
        return PoolInfo(
            project_name=self.project_name,
            token_name=self.token_name,
            token_symbol=self.token_symbol,
            cap=self.cap,
            beneficiary=self.beneficiary.hex(),
            owner=self.owner.hex(),
            factory_id=self.factory_id.hex(),
            total_supply=self.total_supply,
            initialized=self.initialized,
            contract_version=self.contract_version,
        )
