"""Tests for exception messages and the outcome/record models."""

from template_deployer.exceptions import (
    DeployerError,
    InsufficientFundsError,
    NetworkChangedError,
    PoolRegistrationError,
    TemplateNotFoundError,
    UnsupportedNetworkError,
)
from template_deployer.models import ContractTemplate, DeploymentOutcome, SubPoolSpec

from conftest import CONTRACT, CRO


class TestExceptions:
    """Test operator-facing messages."""

    def test_hierarchy(self):
        for exc in (
            TemplateNotFoundError("x"),
            NetworkChangedError(),
            PoolRegistrationError(0, "boom"),
        ):
            assert isinstance(exc, DeployerError)

    def test_insufficient_funds_message(self):
        exc = InsufficientFundsError(required=3 * CRO, available=CRO // 2)

        assert str(exc) == "Insufficient balance. Need at least 3 CRO, but have 0.5 CRO"
        assert exc.shortfall == 3 * CRO - CRO // 2

    def test_unsupported_network_message(self):
        exc = UnsupportedNetworkError(1, (25, 338))

        assert exc.chain_id == 1
        assert "chain ID 25, 338" in str(exc)
        assert str(exc).endswith("Current chain ID: 1")

    def test_network_changed_default_message(self):
        assert "Network changed during deployment" in str(NetworkChangedError())
        assert str(NetworkChangedError("custom")) == "custom"

    def test_pool_registration_message(self):
        exc = PoolRegistrationError(2, "execution reverted")
        assert exc.index == 2
        assert str(exc) == "Pool 2 registration failed: execution reverted"


class TestModels:
    """Test model helpers."""

    def test_outcome_failure(self):
        outcome = DeploymentOutcome.failure(TemplateNotFoundError("x"))

        assert not outcome.success
        assert outcome.error == "Template with ID x not found"
        assert outcome.error_type == "TemplateNotFoundError"
        assert outcome.to_dict() == {"success": False, "error": "Template with ID x not found"}

    def test_outcome_failure_with_empty_message(self):
        assert DeploymentOutcome.failure(RuntimeError()).error == "RuntimeError"

    def test_outcome_success_dict(self):
        outcome = DeploymentOutcome(success=True, contract_address=CONTRACT, transaction_hash="0xabc")
        assert outcome.to_dict() == {
            "success": True,
            "contractAddress": CONTRACT,
            "transactionHash": "0xabc",
        }

    def test_template_round_trip_keys(self):
        template = ContractTemplate.from_dict({
            "id": "vault",
            "category": "VAULT",
            "abi": [],
            "bytecode": "0x00",
            "source_code": "contract V {}",
        })

        assert template.category == "vault"
        assert template.source_code == "contract V {}"
        assert template.to_dict()["sourceCode"] == "contract V {}"

    def test_sub_pool_spec(self):
        assert SubPoolSpec.from_config({"multiplier": 100, "lockPeriod": 60}) == SubPoolSpec(100, 60)
        assert SubPoolSpec.from_config({"multiplier": 100, "lockPeriod": -1}) is None
        assert SubPoolSpec.from_config([100, 60]) is None
