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
    Amount,
    Blueprint,
    BlueprintId,
    CallerId,
    Context,
    NCArgs,
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
    FunctionCallError,
    InvalidVersion,
    guard_once,
    is_version_higher,
    require_initialized,
    require_non_empty,
    require_non_zero_address,
    require_owner,
)


class TokenInfo(NamedTuple):
    """General token information."""

    name: str
    symbol: str
    total_supply: int
    owner: str  # hex-encoded caller id
    initialized: bool
    contract_version: str


@export
class GovernanceToken(Blueprint):
    """Fungible balance ledger with owner-gated mint and burn.

    The life cycle of contracts using this blueprint is the following:

    1. [Anyone] Create the contract (uninitialized).
    2. [Deployer] `setup(name, symbol)`; the caller becomes the owner.
    3. [Owner] `mint()` and `burn()` to manage supply.
    4. [Holders] `transfer()`, `approve()` and `transfer_from()`.
    """

    # Metadata
    name: str
    symbol: str

    # Ledger
    balances: dict[CallerId, Amount]
    allowances: dict[tuple[CallerId, CallerId], Amount]
    total_supply: Amount

    # Access control
    owner: CallerId
    initialized: bool
    locked: bool

    # Version tracking
    contract_version: str

    @public
    def initialize(self, ctx: Context) -> None:
        """Create an empty, uninitialized token."""
        self.name = ""
        self.symbol = ""
        self.balances = {}
        self.allowances = {}
        self.total_supply = Amount(0)
        self.owner = NULL_ADDRESS
        self.initialized = False
        self.locked = False
        self.contract_version = INITIAL_VERSION

    @public
    def setup(self, ctx: Context, name: str, symbol: str) -> None:
        """One-time configuration of the token metadata and owner."""
        guard_once(self)
        require_non_empty(name)
        require_non_empty(symbol)

        self.name = name
        self.symbol = symbol
        self.owner = ctx.caller_id
        emit(self, "Initialized", name, symbol, ctx.caller_id)

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
        """Move tokens from `owner` to `to` using the caller's allowance."""
        require_initialized(self)
        ledger.transfer_from(self, ctx.caller_id, owner, to, amount)

    @public
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
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
            Unauthorized: If caller is not the owner
            InvalidVersion: If new version is not higher than current version
        """
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
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
    def get_token_info(self) -> TokenInfo:
        return TokenInfo(
            name=self.name,
            symbol=self.symbol,
            total_supply=self.total_supply,
            owner=self.owner.hex(),
            initialized=self.initialized,
            contract_version=self.contract_version,
        )
