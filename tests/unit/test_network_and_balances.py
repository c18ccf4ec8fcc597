"""Unit tests for the network identity check and balance reader."""

import pytest
from web3.exceptions import Web3Exception

from depositor.models.deposit import Ledger
from depositor.services.bridge.balance_operations import BalanceReader
from depositor.services.bridge.network_check import NetworkIdentityCheck
from depositor.utils.exceptions import ConfigurationError, NetworkMismatchError

SEPOLIA_ID = 11155111
GIWA_ID = 91342


class TestNetworkIdentityCheck:
    """Tests for NetworkIdentityCheck."""

    @pytest.mark.asyncio
    async def test_matching_ids_pass(self, make_ledger):
        source = make_ledger("Sepolia", SEPOLIA_ID)
        destination = make_ledger("Giwa Sepolia", GIWA_ID)
        check = NetworkIdentityCheck(source, destination, SEPOLIA_ID, GIWA_ID)

        assert await check.verify() == (SEPOLIA_ID, GIWA_ID)
        assert source.chain_id_calls == 1
        assert destination.chain_id_calls == 1

    @pytest.mark.asyncio
    async def test_wrong_source_chain_aborts(self, make_ledger):
        source = make_ledger("Sepolia", 1)
        destination = make_ledger("Giwa Sepolia", GIWA_ID)
        check = NetworkIdentityCheck(source, destination, SEPOLIA_ID, GIWA_ID)

        with pytest.raises(NetworkMismatchError) as exc_info:
            await check.verify()

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.ledger == "Sepolia"
        assert exc_info.value.expected == SEPOLIA_ID
        assert exc_info.value.reported == 1

    @pytest.mark.asyncio
    async def test_wrong_destination_chain_aborts(self, make_ledger):
        source = make_ledger("Sepolia", SEPOLIA_ID)
        destination = make_ledger("Giwa Sepolia", SEPOLIA_ID)
        check = NetworkIdentityCheck(source, destination, SEPOLIA_ID, GIWA_ID)

        with pytest.raises(NetworkMismatchError, match="Giwa Sepolia"):
            await check.verify()

    @pytest.mark.asyncio
    async def test_no_balance_reads_during_check(self, make_ledger):
        source = make_ledger("Sepolia", 1)
        destination = make_ledger("Giwa Sepolia", GIWA_ID)
        check = NetworkIdentityCheck(source, destination, SEPOLIA_ID, GIWA_ID)

        with pytest.raises(NetworkMismatchError):
            await check.verify()

        assert source.balance_calls == []
        assert destination.balance_calls == []


class TestBalanceReader:
    """Tests for BalanceReader."""

    @pytest.mark.asyncio
    async def test_read_routes_to_ledger(self, make_ledger, account_address):
        source = make_ledger("Sepolia", SEPOLIA_ID, balances=[5])
        destination = make_ledger("Giwa Sepolia", GIWA_ID, balances=[7])
        reader = BalanceReader(source, destination)

        assert await reader.read(Ledger.SOURCE, account_address) == 5
        assert await reader.read(Ledger.DESTINATION, account_address) == 7

    @pytest.mark.asyncio
    async def test_every_read_hits_the_ledger(self, make_ledger, account_address):
        destination = make_ledger("Giwa Sepolia", GIWA_ID, balances=[1, 2, 3])
        reader = BalanceReader(make_ledger(), destination)

        values = [await reader.read(Ledger.DESTINATION, account_address) for _ in range(3)]

        assert values == [1, 2, 3]
        assert len(destination.balance_calls) == 3

    @pytest.mark.asyncio
    async def test_rpc_error_propagates(self, make_ledger, account_address):
        destination = make_ledger(
            "Giwa Sepolia", GIWA_ID, balances=[Web3Exception("rpc down")]
        )
        reader = BalanceReader(make_ledger(), destination)

        with pytest.raises(Web3Exception):
            await reader.read(Ledger.DESTINATION, account_address)

    @pytest.mark.asyncio
    async def test_report_snapshots_both_ledgers(self, make_ledger, account_address):
        source = make_ledger("Sepolia", SEPOLIA_ID, balances=[10**18])
        destination = make_ledger("Giwa Sepolia", GIWA_ID, balances=[2 * 10**18])
        reader = BalanceReader(source, destination)

        report = await reader.report(account_address)

        assert report.source.ledger is Ledger.SOURCE
        assert report.source.value == 10**18
        assert report.destination.ledger is Ledger.DESTINATION
        assert report.destination.value == 2 * 10**18
        assert report.source.account == account_address
        assert report.source.timestamp.tzinfo is not None
