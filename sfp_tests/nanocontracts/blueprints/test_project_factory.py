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

import unittest

from hathor import Amount

from sfp.nanocontracts.blueprints.guards import (
    NULL_ADDRESS,
    NULL_BLUEPRINT_ID,
    NULL_CONTRACT_ID,
    AlreadyInitialized,
    AmountExceeds,
    EmptyString,
    FunctionCallError,
    NotInitialized,
    NotWhitelisted,
    ProjectNotFound,
    Unauthorized,
    ZeroAddress,
    ZeroAmount,
)
from sfp_tests.nanocontracts.blueprints.fixtures import HTR_UID, SFPBlueprintTestCase, TestConstants
from sfp_tests.nanocontracts.blueprints.v2.project_pool_v2 import ProjectPoolV2


class ProjectFactoryTest(SFPBlueprintTestCase):
    """Test cases for the ProjectFactory blueprint."""

    def setUp(self) -> None:
        super().setUp()
        self.factory_id = self.deploy_factory()

    def _whitelist(self, user, allowed: bool = True) -> None:
        self.call(self.factory_id, "set_whitelist_status", self.deployer, user.address, allowed)

    def test_setup(self) -> None:
        self.assertEqual(self.view(self.factory_id, "get_beacon_address"), self.pool_blueprint_id)
        self.assertEqual(self.view(self.factory_id, "get_owner"), self.deployer.address)

        info = self.view(self.factory_id, "get_factory_info")
        self.assertEqual(info.total_projects, 0)
        self.assertTrue(info.initialized)
        self.assertEqual(info.beacon_blueprint_id, self.pool_blueprint_id.hex())

    def test_setup_only_once(self) -> None:
        with self.assertRaises(AlreadyInitialized):
            self.call(self.factory_id, "setup", self.alice, self.token_blueprint_id)
        self.assertEqual(self.view(self.factory_id, "get_owner"), self.deployer.address)
        self.assertEqual(self.view(self.factory_id, "get_beacon_address"), self.pool_blueprint_id)

    def test_setup_rejects_null_beacon(self) -> None:
        factory_id = self.create_uninitialized(self.factory_blueprint_id)
        with self.assertRaises(ZeroAddress):
            self.call(factory_id, "setup", self.deployer, NULL_BLUEPRINT_ID)
        with self.assertRaises(NotInitialized):
            self.call(factory_id, "set_whitelist_status", self.deployer, self.alice.address, True)

    def test_whitelist(self) -> None:
        self.assertFalse(self.view(self.factory_id, "is_whitelisted", self.alice.address))

        self._whitelist(self.alice)
        self.assertTrue(self.view(self.factory_id, "is_whitelisted", self.alice.address))
        self.assertEqual(
            self.find_event("WhitelistStatusUpdated"),
            ("WhitelistStatusUpdated", bytes(self.alice.address), True),
        )

        # Setting the same status again is allowed.
        self._whitelist(self.alice)
        self.assertTrue(self.view(self.factory_id, "is_whitelisted", self.alice.address))

        self._whitelist(self.alice, False)
        self.assertFalse(self.view(self.factory_id, "is_whitelisted", self.alice.address))

    def test_whitelist_validation(self) -> None:
        with self.assertRaises(Unauthorized):
            self.call(self.factory_id, "set_whitelist_status", self.alice, self.alice.address, True)
        with self.assertRaises(ZeroAddress):
            self.call(self.factory_id, "set_whitelist_status", self.deployer, NULL_ADDRESS, True)

    def test_change_beacon_address(self) -> None:
        v2_blueprint_id = self._register_blueprint_class(ProjectPoolV2)

        self.call(self.factory_id, "change_beacon_address", self.deployer, v2_blueprint_id)
        self.assertEqual(self.view(self.factory_id, "get_beacon_address"), v2_blueprint_id)
        self.assertEqual(
            self.find_event("BeaconAddressChanged"),
            ("BeaconAddressChanged", bytes(self.pool_blueprint_id), bytes(v2_blueprint_id)),
        )

        with self.assertRaises(Unauthorized):
            self.call(self.factory_id, "change_beacon_address", self.alice, self.pool_blueprint_id)
        with self.assertRaises(ZeroAddress):
            self.call(self.factory_id, "change_beacon_address", self.deployer, NULL_BLUEPRINT_ID)

    def test_create_project(self) -> None:
        self._whitelist(self.alice)

        pool_id = self.create_project(self.factory_id, self.alice)

        self.assertEqual(
            self.find_event("ProjectCreated"),
            (
                "ProjectCreated",
                TestConstants.DEMO_CAP,
                TestConstants.PROJECT_NAME,
                TestConstants.TOKEN_SYMBOL,
                TestConstants.TOKEN_NAME,
                bytes(self.alice.address),
                bytes(pool_id),
            ),
        )
        self.assertEqual(self.view(self.factory_id, "get_project", self.alice.address, 0), pool_id)
        self.assertEqual(self.view(self.factory_id, "get_projects", self.alice.address), [pool_id])
        self.assertEqual(self.view(self.factory_id, "get_project_count", self.alice.address), 1)
        self.assertEqual(self.view(self.factory_id, "get_project_creator", pool_id), self.alice.address)
        self.assertEqual(self.view(self.factory_id, "get_factory_info").total_projects, 1)
        self.assertFalse(self.get_readonly_contract(self.factory_id).locked)

        info = self.view(pool_id, "get_pool_info")
        self.assertEqual(info.cap, TestConstants.DEMO_CAP)
        self.assertEqual(info.project_name, TestConstants.PROJECT_NAME)
        self.assertEqual(info.beneficiary, self.alice.address.hex())
        self.assertEqual(info.owner, self.alice.address.hex())
        self.assertEqual(info.factory_id, self.factory_id.hex())

        # The created pool is already set up.
        with self.assertRaises(AlreadyInitialized):
            self.call(
                pool_id, "setup", self.bob, Amount(1), "x", "y", "z", self.bob.address,
            )

    def test_create_multiple_projects(self) -> None:
        self._whitelist(self.alice)
        self._whitelist(self.bob)

        first = self.create_project(self.factory_id, self.alice)
        second = self.create_project(self.factory_id, self.alice, amount=5, project_name="Second")
        other = self.create_project(self.factory_id, self.bob)

        self.assertEqual(len({first, second, other}), 3)
        self.assertEqual(self.view(self.factory_id, "get_projects", self.alice.address), [first, second])
        self.assertEqual(self.view(self.factory_id, "get_projects", self.bob.address), [other])
        self.assertEqual(self.view(self.factory_id, "get_factory_info").total_projects, 3)
        self.assertEqual(self.view(second, "get_pool_info").cap, 5)

    def test_create_project_validation(self) -> None:
        with self.assertRaises(NotWhitelisted):
            self.create_project(self.factory_id, self.alice)

        self._whitelist(self.alice)
        with self.assertRaises(ZeroAmount):
            self.create_project(self.factory_id, self.alice, amount=0)
        with self.assertRaises(EmptyString):
            self.create_project(self.factory_id, self.alice, project_name="")
        with self.assertRaises(EmptyString):
            self.create_project(self.factory_id, self.alice, token_symbol="")
        with self.assertRaises(EmptyString):
            self.create_project(self.factory_id, self.alice, token_name="")

        self._whitelist(self.alice, False)
        with self.assertRaises(NotWhitelisted):
            self.create_project(self.factory_id, self.alice)

        self.assertEqual(self.view(self.factory_id, "get_project_count", self.alice.address), 0)
        self.assertEqual(self.view(self.factory_id, "get_projects", self.alice.address), [])

    def test_whitelist_check_comes_first(self) -> None:
        with self.assertRaises(NotWhitelisted):
            self.create_project(self.factory_id, self.alice, amount=0, project_name="")

    def test_beacon_change_affects_new_projects_only(self) -> None:
        self._whitelist(self.alice)
        old_pool = self.create_project(self.factory_id, self.alice)

        v2_blueprint_id = self._register_blueprint_class(ProjectPoolV2)
        self.call(self.factory_id, "change_beacon_address", self.deployer, v2_blueprint_id)
        new_pool = self.create_project(self.factory_id, self.alice)

        self.assertEqual(self.view(new_pool, "get_pool_info").project_name, TestConstants.PROJECT_NAME)
        self.assertEqual(self.view(new_pool, "get_contribution_limit"), TestConstants.DEMO_CAP)
        self.assertEqual(self.get_readonly_contract(old_pool).contract_version, "1.0.0")

    def test_lookups_of_unknown_projects(self) -> None:
        with self.assertRaises(ProjectNotFound):
            self.view(self.factory_id, "get_project", self.alice.address, 0)
        with self.assertRaises(ProjectNotFound):
            self.view(self.factory_id, "get_project_creator", NULL_CONTRACT_ID)
        self.assertEqual(self.view(self.factory_id, "get_project_count", self.alice.address), 0)

    def test_withdraw_stuck_tokens(self) -> None:
        token_id = self.deploy_token(owner=self.bob)
        self.call(token_id, "mint", self.bob, self.factory_id, Amount(50))

        with self.assertRaises(Unauthorized):
            self.call(self.factory_id, "withdraw_stuck_tokens", self.alice, token_id, Amount(10))
        with self.assertRaises(AmountExceeds):
            self.call(self.factory_id, "withdraw_stuck_tokens", self.deployer, token_id, Amount(51))

        self.call(self.factory_id, "withdraw_stuck_tokens", self.deployer, token_id, Amount(50))
        self.assertEqual(self.view(token_id, "balance_of", self.factory_id), 0)
        self.assertEqual(self.view(token_id, "balance_of", self.deployer.address), 50)
        self.assertEqual(
            self.find_event("StuckTokensWithdrawn"),
            ("StuckTokensWithdrawn", bytes(token_id), 50),
        )

    def test_transfer_ownership(self) -> None:
        self.call(self.factory_id, "transfer_ownership", self.deployer, self.alice.address)

        with self.assertRaises(Unauthorized):
            self._whitelist(self.bob)
        self.call(self.factory_id, "set_whitelist_status", self.alice, self.bob.address, True)
        self.assertTrue(self.view(self.factory_id, "is_whitelisted", self.bob.address))

    def test_unknown_method(self) -> None:
        with self.assertRaises(FunctionCallError):
            self.call(self.factory_id, "createProject", self.alice, Amount(1), "a", "b", "c")
        with self.assertRaises(FunctionCallError):
            self.call(self.factory_id, "receive", self.alice, actions=[self.htr_deposit(10)])
        self.assertEqual(self.runner.get_current_balance(self.factory_id, HTR_UID).value, 0)


if __name__ == '__main__':
    unittest.main()
