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

"""
Shared fixtures for the SFP blueprint test suites.

Provides the deployment steps every suite repeats (token, factory, pool),
named test users, and access to the records emitted by the last call.
"""

from dataclasses import dataclass
from typing import Any, Optional

from hathor import HATHOR_TOKEN_UID, Address, Amount, BlueprintId, CallerId, ContractId, NCDepositAction, TokenUid
from hathor.nanocontracts.context import Context
from hathor_tests.nanocontracts.blueprints.unittest import BlueprintTestCase

from sfp.nanocontracts.blueprints.events import EventRecord, decode_event
from sfp.nanocontracts.blueprints.governance_token import GovernanceToken
from sfp.nanocontracts.blueprints.project_factory import ProjectFactory
from sfp.nanocontracts.blueprints.project_pool import ProjectPool

HTR_UID = TokenUid(HATHOR_TOKEN_UID)


class TestConstants:
    """Centralized test constants, matching the demo deployment."""

    DEMO_CAP = Amount(1000)
    DEMO_MINT = Amount(2000)
    DEMO_CONTRIBUTION = Amount(1000)

    PROJECT_NAME = "Demo"
    TOKEN_NAME = "Demo Token"
    TOKEN_SYMBOL = "DTK"

    GOVERNANCE_NAME = "Governance"
    GOVERNANCE_SYMBOL = "GOV"


@dataclass
class TestUser:
    """A named wallet used as caller in tests."""

    address: Address
    name: str = "TestUser"


class SFPBlueprintTestCase(BlueprintTestCase):
    """Base test case registering the SFP blueprints and deploy helpers."""

    def setUp(self) -> None:
        super().setUp()

        self.token_blueprint_id = self._register_blueprint_class(GovernanceToken)
        self.pool_blueprint_id = self._register_blueprint_class(ProjectPool)
        self.factory_blueprint_id = self._register_blueprint_class(ProjectFactory)

        self.tx = self.get_genesis_tx()

        self.deployer = self.create_user("Deployer")
        self.alice = self.create_user("Alice")
        self.bob = self.create_user("Bob")

    def create_user(self, name: str) -> TestUser:
        return TestUser(address=self.gen_random_address(), name=name)

    def ctx(self, caller: Any, actions: Optional[list[Any]] = None) -> Context:
        """Build a context for `caller`, a TestUser or a raw caller id."""
        caller_id = caller.address if isinstance(caller, TestUser) else caller
        return self.create_context(
            actions=actions or [],
            vertex=self.tx,
            caller_id=caller_id,
            timestamp=self.now,
        )

    def htr_deposit(self, amount: int) -> NCDepositAction:
        return NCDepositAction(token_uid=HTR_UID, amount=Amount(amount))

    def call(self, contract_id: ContractId, method: str, caller: Any, *args: Any, actions: Optional[list[Any]] = None) -> Any:
        return self.runner.call_public_method(contract_id, method, self.ctx(caller, actions), *args)

    def view(self, contract_id: ContractId, method: str, *args: Any) -> Any:
        return self.runner.call_view_method(contract_id, method, *args)

    def create_uninitialized(self, blueprint_id: BlueprintId, caller: Optional[TestUser] = None) -> ContractId:
        nc_id = self.gen_random_contract_id()
        self.runner.create_contract(nc_id, blueprint_id, self.ctx(caller or self.deployer))
        return nc_id

    def deploy_token(
        self,
        owner: Optional[TestUser] = None,
        name: str = TestConstants.GOVERNANCE_NAME,
        symbol: str = TestConstants.GOVERNANCE_SYMBOL,
    ) -> ContractId:
        owner = owner or self.deployer
        token_id = self.create_uninitialized(self.token_blueprint_id, owner)
        self.call(token_id, "setup", owner, name, symbol)
        return token_id

    def deploy_pool(
        self,
        beneficiary: Optional[TestUser] = None,
        cap: int = TestConstants.DEMO_CAP,
    ) -> ContractId:
        """Deploy a pool directly, without a factory."""
        beneficiary = beneficiary or self.deployer
        pool_id = self.create_uninitialized(self.pool_blueprint_id, beneficiary)
        self.call(
            pool_id,
            "setup",
            beneficiary,
            Amount(cap),
            TestConstants.PROJECT_NAME,
            TestConstants.TOKEN_NAME,
            TestConstants.TOKEN_SYMBOL,
            beneficiary.address,
        )
        return pool_id

    def deploy_factory(self, owner: Optional[TestUser] = None) -> ContractId:
        owner = owner or self.deployer
        factory_id = self.create_uninitialized(self.factory_blueprint_id, owner)
        self.call(factory_id, "setup", owner, self.pool_blueprint_id)
        return factory_id

    def create_project(
        self,
        factory_id: ContractId,
        creator: TestUser,
        amount: int = TestConstants.DEMO_CAP,
        project_name: str = TestConstants.PROJECT_NAME,
        token_name: str = TestConstants.TOKEN_NAME,
        token_symbol: str = TestConstants.TOKEN_SYMBOL,
    ) -> ContractId:
        return self.call(
            factory_id,
            "create_project",
            creator,
            Amount(amount),
            project_name,
            token_name,
            token_symbol,
        )

    def mint_and_approve(
        self,
        token_id: ContractId,
        owner: TestUser,
        holder: TestUser,
        spender: CallerId,
        amount: int,
    ) -> None:
        self.call(token_id, "mint", owner, holder.address, Amount(amount))
        self.call(token_id, "approve", holder, spender, Amount(amount))

    def last_events(self) -> list[EventRecord]:
        """Decode every record emitted by the last executed call."""
        call_info = self.runner.get_last_call_info()
        return [decode_event(event.data) for event in call_info.nc_logger.__events__]

    def last_event_names(self) -> list[str]:
        return [record[0] for record in self.last_events()]

    def find_event(self, name: str) -> EventRecord:
        for record in self.last_events():
            if record[0] == name:
                return record
        self.fail(f"No {name} record emitted")
