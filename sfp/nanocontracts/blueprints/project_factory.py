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
    ContractId,
    NCArgs,
    export,
    fallback,
    public,
    view,
)

from sfp.nanocontracts.blueprints.events import emit
from sfp.nanocontracts.blueprints.guards import (
    INITIAL_VERSION,
    NULL_ADDRESS,
    NULL_BLUEPRINT_ID,
    FunctionCallError,
    InvalidVersion,
    NotWhitelisted,
    ProjectNotFound,
    guard_once,
    is_version_higher,
    nonreentrant,
    require_initialized,
    require_non_empty,
    require_non_zero_address,
    require_non_zero_amount,
    require_owner,
    require_sufficient_balance,
)


class FactoryInfo(NamedTuple):
    """General factory information."""

    owner: str  # hex-encoded caller id
    beacon_blueprint_id: str  # hex-encoded blueprint id
    total_projects: int
    initialized: bool
    contract_version: str


@export
class ProjectFactory(Blueprint):
    """Whitelist-gated registry that deploys ProjectPool contracts.

    New pools are created from the current beacon blueprint. Changing the
    beacon only affects pools created afterwards; existing pools move to a
    new blueprint through `upgrade_project`.
    """

    # Deployment configuration
    beacon_blueprint_id: BlueprintId

    # Access control
    whitelist: dict[CallerId, bool]
    owner: CallerId
    initialized: bool
    locked: bool

    # Registry
    projects: dict[tuple[CallerId, int], ContractId]  # (creator, index) -> pool
    project_count: dict[CallerId, int]
    project_creator: dict[ContractId, CallerId]
    total_projects: int

    # Version tracking
    contract_version: str

    @public
    def initialize(self, ctx: Context) -> None:
        """Create an empty, uninitialized factory."""
        self.beacon_blueprint_id = NULL_BLUEPRINT_ID
        self.whitelist = {}
        self.owner = NULL_ADDRESS
        self.initialized = False
        self.locked = False
        self.projects = {}
        self.project_count = {}
        self.project_creator = {}
        self.total_projects = 0
        self.contract_version = INITIAL_VERSION

    @public
    def setup(self, ctx: Context, beacon_blueprint_id: BlueprintId) -> None:
        """One-time configuration; the caller becomes the owner."""
        guard_once(self)
        require_non_zero_address(beacon_blueprint_id)

        self.beacon_blueprint_id = beacon_blueprint_id
        self.owner = ctx.caller_id
        emit(self, "Initialized", beacon_blueprint_id, ctx.caller_id)

    @public
    def change_beacon_address(self, ctx: Context, new_beacon_blueprint_id: BlueprintId) -> None:
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        require_non_zero_address(new_beacon_blueprint_id)

        previous = self.beacon_blueprint_id
        self.beacon_blueprint_id = new_beacon_blueprint_id
        emit(self, "BeaconAddressChanged", previous, new_beacon_blueprint_id)

    @public
    def set_whitelist_status(self, ctx: Context, account: CallerId, allowed: bool) -> None:
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        require_non_zero_address(account)

        self.whitelist[account] = allowed
        emit(self, "WhitelistStatusUpdated", account, allowed)

    @public
    def create_project(
        self,
        ctx: Context,
        amount: Amount,
        project_name: str,
        token_name: str,
        token_symbol: str,
    ) -> ContractId:
        """Deploy and set up a new project pool owned by the caller.

        Args:
            ctx: Transaction context
            amount: Contribution cap of the new pool
            project_name: Human-readable project name
            token_name: Name of the pool governance token
            token_symbol: Symbol of the pool governance token

        Returns:
            ContractId of the created pool
        """
        require_initialized(self)
        creator = ctx.caller_id
        if not self.whitelist.get(creator, False):
            raise NotWhitelisted("Caller is not whitelisted")
        require_non_zero_amount(amount)
        require_non_empty(project_name)
        require_non_empty(token_symbol)
        require_non_empty(token_name)

        with nonreentrant(self):
            index = self.project_count.get(creator, 0)
            salt = bytes(creator) + index.to_bytes(8, "big")
            pool_id, _ = self.syscall.create_contract(self.beacon_blueprint_id, salt, [])
            self.syscall.call_public_method(
                pool_id,
                "setup",
                [],
                amount,
                project_name,
                token_name,
                token_symbol,
                creator,
            )

            self.projects[(creator, index)] = pool_id
            self.project_count[creator] = index + 1
            self.project_creator[pool_id] = creator
            self.total_projects += 1

        emit(self, "ProjectCreated", amount, project_name, token_symbol, token_name, creator, pool_id)
        return pool_id

    @public
    def upgrade_project(
        self,
        ctx: Context,
        pool_id: ContractId,
        new_blueprint_id: BlueprintId,
        new_version: str,
    ) -> None:
        """Move a registered pool to a new blueprint (owner only)."""
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        if pool_id not in self.project_creator:
            raise ProjectNotFound("Pool was not created by this factory")

        with nonreentrant(self):
            self.syscall.call_public_method(pool_id, "upgrade_contract", [], new_blueprint_id, new_version)

    @public
    def withdraw_stuck_tokens(self, ctx: Context, token_id: ContractId, amount: Amount) -> None:
        """Send tokens held by the factory itself to the owner."""
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
    def transfer_ownership(self, ctx: Context, new_owner: CallerId) -> None:
        require_initialized(self)
        require_owner(ctx.caller_id, self.owner)
        require_non_zero_address(new_owner)

        previous_owner = self.owner
        self.owner = new_owner
        emit(self, "OwnershipTransferred", previous_owner, new_owner)

    @public
    def upgrade_contract(self, ctx: Context, new_blueprint_id: BlueprintId, new_version: str) -> None:
        """Upgrade the factory itself; registered pools are left untouched."""
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
    def get_beacon_address(self) -> BlueprintId:
        return self.beacon_blueprint_id

    @view
    def is_whitelisted(self, account: CallerId) -> bool:
        return self.whitelist.get(account, False)

    @view
    def get_project(self, creator: CallerId, index: int) -> ContractId:
        key = (creator, index)
        if key not in self.projects:
            raise ProjectNotFound(f"No project {index} for this creator")
        return self.projects[key]

    @view
    def get_projects(self, creator: CallerId) -> list[ContractId]:
        count = self.project_count.get(creator, 0)
        return [self.projects[(creator, index)] for index in range(count)]

    @view
    def get_project_count(self, creator: CallerId) -> int:
        return self.project_count.get(creator, 0)

    @view
    def get_project_creator(self, pool_id: ContractId) -> CallerId:
        if pool_id not in self.project_creator:
            raise ProjectNotFound("Pool was not created by this factory")
        return self.project_creator[pool_id]

    @view
    def get_owner(self) -> CallerId:
        return self.owner

    @view
    def get_contract_version(self) -> str:
        return self.contract_version

    @view
    def get_factory_info(self) -> FactoryInfo:
        return FactoryInfo(
            owner=self.owner.hex(),
            beacon_blueprint_id=self.beacon_blueprint_id.hex(),
            total_projects=self.total_projects,
            initialized=self.initialized,
            contract_version=self.contract_version,
        )
