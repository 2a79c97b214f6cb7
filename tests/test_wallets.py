"""Wallet creation and key loading across chain families."""

import pytest

from src.blockchain.base import CreateWalletOptions
from src.blockchain.evm import EvmAdapter
from src.blockchain.hd import mnemonic_to_seed, new_mnemonic, select_path
from src.blockchain.networks import NetworkDescriptor, NetworkId, SigningConfig
from src.blockchain.solana import SolanaAdapter
from src.blockchain.tron import TronAdapter

TEST_MNEMONIC = "test test test test test test test test test test test junk"
FIRST_EVM_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def _descriptor(network_id, token, chain_id=None):
    return NetworkDescriptor(
        id=network_id,
        display_name=network_id.value,
        rpc_endpoint="http://localhost:1",
        native_token=token,
        chain_id=chain_id,
    )


@pytest.fixture
def evm():
    return EvmAdapter(_descriptor(NetworkId.POLYGON, "POL", 137))


@pytest.fixture
def tron():
    return TronAdapter(_descriptor(NetworkId.TRC20, "TRX"))


@pytest.fixture
def solana():
    return SolanaAdapter(_descriptor(NetworkId.SOLANA, "SOL"))


def test_new_mnemonic_is_twelve_english_words():
    first = new_mnemonic()
    second = new_mnemonic()

    assert len(first.split()) == 12
    assert first != second
    assert len(mnemonic_to_seed(first)) == 64


def test_select_path():
    template = "m/44'/60'/{index}'/0/0"
    assert select_path(template, None, None) == "m/44'/60'/0'/0/0"
    assert select_path(template, 3, None) == "m/44'/60'/3'/0/0"
    assert select_path(template, 3, "m/44'/60'/0'/0/7") == "m/44'/60'/0'/0/7"


@pytest.mark.asyncio
async def test_evm_known_mnemonic_vector(evm):
    wallet = await evm.create_wallet(CreateWalletOptions(mnemonic=TEST_MNEMONIC))

    assert wallet.address == FIRST_EVM_ADDRESS
    assert wallet.derivation_path == "m/44'/60'/0'/0/0"
    assert wallet.mnemonic == TEST_MNEMONIC
    assert wallet.network == "polygon"
    assert wallet.private_key.startswith("0x")


@pytest.mark.asyncio
@pytest.mark.parametrize("adapter_name", ["evm", "tron", "solana"])
async def test_mnemonic_derivation_is_deterministic(adapter_name, request):
    adapter = request.getfixturevalue(adapter_name)
    options = CreateWalletOptions(mnemonic=TEST_MNEMONIC, index=2)

    first = await adapter.create_wallet(options)
    second = await adapter.create_wallet(options)

    assert first.address == second.address
    assert first.private_key == second.private_key
    assert first.index == 2
    assert adapter.validate_address(first.address)


@pytest.mark.asyncio
@pytest.mark.parametrize("adapter_name", ["evm", "tron", "solana"])
async def test_different_index_gives_different_address(adapter_name, request):
    adapter = request.getfixturevalue(adapter_name)

    first = await adapter.create_wallet(CreateWalletOptions(mnemonic=TEST_MNEMONIC, index=0))
    second = await adapter.create_wallet(CreateWalletOptions(mnemonic=TEST_MNEMONIC, index=1))

    assert first.address != second.address


@pytest.mark.asyncio
@pytest.mark.parametrize("adapter_name", ["evm", "tron", "solana"])
async def test_random_wallets_differ(adapter_name, request):
    adapter = request.getfixturevalue(adapter_name)

    first = await adapter.create_wallet()
    second = await adapter.create_wallet()

    assert first.address != second.address
    assert first.mnemonic is None
    assert adapter.validate_address(first.address)


@pytest.mark.asyncio
@pytest.mark.parametrize("adapter_name", ["evm", "tron", "solana"])
async def test_index_without_mnemonic_generates_one(adapter_name, request):
    adapter = request.getfixturevalue(adapter_name)

    wallet = await adapter.create_wallet(CreateWalletOptions(index=1))

    assert len(wallet.mnemonic.split()) == 12
    again = await adapter.create_wallet(CreateWalletOptions(mnemonic=wallet.mnemonic, index=1))
    assert again.address == wallet.address


@pytest.mark.asyncio
async def test_solana_public_key_is_address(solana):
    wallet = await solana.create_wallet(CreateWalletOptions(mnemonic=TEST_MNEMONIC))

    assert wallet.public_key == wallet.address
    assert wallet.derivation_path == "m/44'/501'/0'/0'"


@pytest.mark.asyncio
async def test_tron_wallet_shape(tron):
    wallet = await tron.create_wallet(CreateWalletOptions(mnemonic=TEST_MNEMONIC))

    assert wallet.address.startswith("T")
    assert len(wallet.address) == 34
    assert len(wallet.private_key) == 64


def test_evm_signer_from_mnemonic_matches_created_wallet(evm):
    evm._load_signer(SigningConfig(mnemonic=TEST_MNEMONIC))

    assert evm.has_signer
    assert evm._account.address == FIRST_EVM_ADDRESS


@pytest.mark.asyncio
async def test_evm_signer_from_private_key_without_prefix(evm):
    wallet = await evm.create_wallet()

    evm._load_signer(SigningConfig(private_key=wallet.private_key.removeprefix("0x")))

    assert evm._account.address == wallet.address


@pytest.mark.asyncio
async def test_tron_signer_matches_created_wallet(tron):
    wallet = await tron.create_wallet(CreateWalletOptions(mnemonic=TEST_MNEMONIC, index=1))

    tron._load_signer(SigningConfig(mnemonic=TEST_MNEMONIC, wallet_index=1))

    assert tron._address == wallet.address


@pytest.mark.asyncio
async def test_solana_signer_from_base58_secret(solana):
    wallet = await solana.create_wallet()

    solana._load_signer(SigningConfig(private_key=wallet.private_key))

    assert str(solana._keypair.pubkey()) == wallet.address
