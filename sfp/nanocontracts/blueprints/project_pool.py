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
    HATHOR_TOKEN_UID,
    Address,
    Amount,
    Blueprint,
    BlueprintId,
    CallerId,
    Context,
    ContractId,
    NCArgs,
    NCDepositAction,
    NCWithdrawalAction,
    TokenUid,
    export,
    fallback,
    public,
    view,
)

from sfp.nanocontracts.blueprints import ledger
from sfp.nanocontracts.blueprints.events import emit
from sfp.nanocontracts.blueprints.guards import (
    INITIAL_VERSION,
    NULL_ADDRESS,
    NULL_CONTRACT_ID,
    FunctionCallError,
    InvalidActions,
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
    require_sufficient_balance,
    require_within_cap,
)


class PoolInfo(NamedTuple):
    """General project pool information."""

    project_name: str
    token_name: str
    token_symbol: str
    cap: int
    beneficiary: str  # hex-encoded caller id
    owner: str  # hex-encoded caller id
    factory_id: str  # hex-encoded contract id, all zeros when set up directly
    total_supply: int
    initialized: bool
    contract_version: str


class ContributionStats(NamedTuple):
    """Contribution counters of a project pool."""

    contributions_count: int
    total_native_contributed: int
    native_forwarded: int


@export
class ProjectPool(Blueprint):
    """Per-project pool that accepts capped contributions for a beneficiary.

    The pool is also the ledger of the project's governance token: the owner
    mints and burns it, holders transfer it like any fungible token.

    The life cycle of contracts using this blueprint is the following:

    1. [Factory] Create the contract from the factory beacon (uninitialized).
    2. [Factory] `setup(...)` with the project creator as beneficiary.
    3. [Anyone] `contribute_native()` or `contribute_token(...)`.
    4. [Beneficiary] `claim_native()` to collect forwarded HTR.
    5. [Owner] `mint()`, `burn()` and `withdraw_stuck_tokens(...)`.
    """

    # Project configuration
    cap: Amount  # Maximum amount accepted by a single contribution
    project_name: str
    token_name: str
    token_symbol: str
    beneficiary: CallerId
    factory_id: ContractId  # Factory that created this pool

    # Governance token ledger
    balances: dict[CallerId, Amount]
    allowances: dict[tuple[CallerId, CallerId], Amount]
    total_supply: Amount

    # Contribution accounting
    native_forwarded: Amount  # HTR owed to the beneficiary, not yet claimed
    total_native_contributed: Amount
    total_token_contributed: dict[ContractId, Amount]
    contributions_count: int

    # Access control
    owner: CallerId
    initialized: bool
    locked: bool

    # Version tracking
    contract_version: str

    @public
    def initialize(self, ctx: Context) -> None:
        """Create an empty, uninitialized pool."""
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
        self.contract_version = INITIAL_VERSION

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
        """One-time configuration of the project.

        Args:
            ctx: Transaction context
            cap: Maximum amount of a single contribution
            project_name: Human-readable project name
            token_name: Name of the project governance token
            token_symbol: Symbol of the project governance token
            beneficiary: Receiver of contributions, also the pool owner
        """
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
            # Created through a factory contract
            self.factory_id = ContractId(ctx.caller_id)

        emit(self, "Initialized", cap, project_name, token_name, token_symbol, beneficiary)

    def _native_deposit_amount(self, ctx: Context) -> Amount:
        """Sum the HTR deposits of the call, rejecting any other action."""
        total = Amount(0)
        for token_uid, actions in ctx.actions.items():
            if token_uid != HATHOR_TOKEN_UID:
                raise InvalidActions("Only HTR deposits are accepted")
            for action in actions:
                if not isinstance(action, NCDepositAction):
                    raise InvalidActions("Expected deposit action")
                total = Amount(total + action.amount)
        return total

    @public(allow_deposit=True)
    def contribute_native(self, ctx: Context) -> None:
        """Contribute HTR to the project; it is forwarded to the beneficiary."""
        require_initialized(self)
        amount = self._native_deposit_amount(ctx)
        require_non_zero_amount(amount)
        require_within_cap(amount, self.cap)

        self.native_forwarded = Amount(self.native_forwarded + amount)
        self.total_native_contributed = Amount(self.total_native_contributed + amount)
        self.contributions_count += 1
        emit(self, "ContributedNative", ctx.caller_id, amount)

    @public(allow_withdrawal=True)
    def claim_native(self, ctx: Context) -> None:
        """Withdraw forwarded HTR (beneficiary only)."""
        require_initialized(self)
        if ctx.caller_id != self.beneficiary:
            raise Unauthorized("Only beneficiary can claim contributions")

        action = ctx.get_single_action(TokenUid(HATHOR_TOKEN_UID))
        if not isinstance(action, NCWithdrawalAction):
            raise InvalidActions("Expected withdrawal action")
        require_non_zero_amount(action.amount)
        require_sufficient_balance(action.amount, self.native_forwarded)

        self.native_forwarded = Amount(self.native_forwarded - action.amount)
        emit(self, "NativeClaimed", self.beneficiary, action.amount)

    @public
    def contribute_token(self, ctx: Context, token_id: ContractId, amount: Amount) -> None:
        """Contribute fungible tokens, pulled from the caller into the beneficiary.

        The caller must have approved this pool to spend `amount` on the
        token contract beforehand.
        """
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
    def withdraw_stuck_tokens(self, ctx: Context, token_id: ContractId, amount: Amount) -> None:
        """Send tokens held by the pool itself to the owner."""
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        require_non_zero_address(token_id)
        require_non_zero_amount(amount)

        with nonreentrant(self):
            token = self.syscall.get_contract(token_id, blueprint_id=None)
            held = token.view().balance_of(self.syscall.get_contract_id())
            require_sufficient_balance(amount, held)

            token.public().transfer(self.owner, amount)
            emit(self, "StuckTokensWithdrawn", token_id, amount)

    @public
    def mint(self, ctx: Context, to: CallerId, amount: Amount) -> None:
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        ledger.mint(self, to, amount)
        emit(self, "Minted", to, amount)

    @public
    def burn(self, ctx: Context, account: CallerId, amount: Amount) -> None:
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        ledger.burn(self, account, amount)
        emit(self, "Burned", account, amount)

    @public
    def transfer(self, ctx: Context, to: CallerId, amount: Amount) -> None:
        require_initialized(self)
        ledger.transfer(self, ctx.caller_id, to, amount)

    @public
    def approve(self, ctx: Context, spender: CallerId, amount: Amount) -> None:
        require_initialized(self)
        ledger.approve(self, ctx.caller_id, spender, amount)

    @public
    def transfer_from(self, ctx: Context, owner: CallerId, to: CallerId, amount: Amount) -> None:
        require_initialized(self)
        ledger.transfer_from(self, ctx.caller_id, owner, to, amount)

    @public
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
        """Hand over owner capabilities; the beneficiary is unchanged."""
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        require_non_zero_address(new_owner)

        previous_owner = self.owner
        self.owner = new_owner
        emit(self, "OwnershipTransferred", previous_owner, new_owner)

    @public
    def upgrade_contract(self, ctx: Context, new_blueprint_id: BlueprintId, new_version: str) -> None:
        """Upgrade this contract to a new blueprint version.

        Args:
            ctx: Transaction context
            new_blueprint_id: The blueprint ID to upgrade to
            new_version: Version string for the new blueprint (e.g., "1.1.0")

        Raises:
            Unauthorized: If caller is not the owner or the creating factory
            InvalidVersion: If new version is not higher than current version
        """
        require_initialized(self)
        if ctx.caller_id != self.owner and ctx.caller_id != self.factory_id:
            raise Unauthorized("Only owner or factory can upgrade this contract")
        if not is_version_higher(new_version, self.contract_version):
            raise InvalidVersion(f"New version {new_version} must be higher than current {self.contract_version}")

        self.contract_version = new_version
        self.syscall.change_blueprint(new_blueprint_id)

    @fallback(allow_deposit=True)
    def fallback(self, ctx: Context, method_name: str, nc_args: NCArgs) -> None:
        raise FunctionCallError(f"Unknown method: {method_name!r}")

    @view
    def balance_of(self, account: CallerId) -> Amount:
        return ledger.balance_of(self, account)

    @view
    def allowance(self, owner: CallerId, spender: CallerId) -> Amount:
        return ledger.allowance_of(self, owner, spender)

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
    def is_initialized(self) -> bool:
        return self.initialized

    @view
    def get_token_contributed(self, token_id: ContractId) -> Amount:
        return self.total_token_contributed.get(token_id, Amount(0))

    @view
    def get_contribution_stats(self) -> ContributionStats:
        return ContributionStats(
            contributions_count=self.contributions_count,
            total_native_contributed=self.total_native_contributed,
            native_forwarded=self.native_forwarded,
        )

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
