import io
from datetime import datetime

import pytest
from PIL import Image

GENERATED_AT = datetime(2026, 10, 19, 12, 0, 0)


def make_image_bytes(fmt="PNG", size=(4, 4), color="red"):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


@pytest.fixture
def owner():
    return {
        "ownerName": "Sam",
        "ownerFullName": "Samantha Q. Holder",
        "ownerAddress": "12 Harbor Lane",
        "ownerCity": "Portland",
        "ownerState": "Oregon",
        "ownerZipCode": "97201",
        "ownerPhone": "555-0100",
    }


@pytest.fixture
def executor():
    return {
        "executorName": "Jordan Reyes",
        "executorAddress": "0xE0E0E0E0E0E0E0E0E0E0E0E0E0E0E0E0E0E0E0E0",
        "executorEmail": "jordan@example.com",
    }


@pytest.fixture
def beneficiaries():
    return [
        {"id": "b1", "name": "Alice", "walletAddress": "0xA11CE00000000000000000000000000000000001",
         "ensName": "alice.eth"},
        {"id": "b2", "name": "Bob", "walletAddress": "0xB0B0000000000000000000000000000000000002"},
    ]


@pytest.fixture
def assets():
    return [
        {"id": "eth", "chain": "ethereum", "type": "native", "symbol": "ETH", "name": "Ether",
         "balance": "1.5", "balanceFormatted": "1.5 ETH",
         "walletAddress": "0x1111111111111111111111111111111111111111",
         "walletProvider": "MetaMask"},
        {"id": "usdc", "chain": "base", "type": "erc20", "symbol": "USDC", "name": "USD Coin",
         "balance": "1000", "balanceFormatted": "1,000 USDC",
         "walletAddress": "0x1111111111111111111111111111111111111111",
         "walletProvider": "MetaMask"},
        {"id": "punk", "chain": "ethereum", "type": "erc721", "symbol": "PUNK",
         "name": "Punk 7804", "balance": "1", "tokenId": "7804",
         "contractAddress": "0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB",
         "imageUrl": "ipfs://QmPunk7804",
         "walletAddress": "0x1111111111111111111111111111111111111111",
         "walletProvider": "MetaMask"},
        {"id": "btc", "chain": "bitcoin", "type": "btc", "symbol": "BTC", "name": "Bitcoin",
         "balance": "0.25", "balanceFormatted": "0.25 BTC",
         "walletAddress": "bc1qexampleexampleexampleexample0000"},
    ]


@pytest.fixture
def allocations():
    return [
        {"assetId": "eth", "beneficiaryId": "b1", "type": "percentage", "percentage": 33},
        {"assetId": "eth", "beneficiaryId": "b2", "type": "percentage", "percentage": 67},
        {"assetId": "usdc", "beneficiaryId": "b2", "type": "amount", "amount": "250.50"},
        {"assetId": "punk", "beneficiaryId": "b1", "type": "percentage", "percentage": 37},
        {"assetId": "punk", "beneficiaryId": "b2", "type": "amount", "amount": "3"},
        {"assetId": "btc", "beneficiaryId": "b2", "type": "percentage", "percentage": 100},
    ]


@pytest.fixture
def packet_args(owner, executor, beneficiaries, allocations, assets):
    return dict(
        owner=owner,
        executor=executor,
        beneficiaries=beneficiaries,
        allocations=allocations,
        assets=assets,
        wallet_names={"0x1111111111111111111111111111111111111111": "holder.eth"},
        connected_wallets=["0x1111111111111111111111111111111111111111"],
        key_instructions="Seed phrase is in the safe.\n\nHardware wallet is in the desk drawer.",
        generated_at=GENERATED_AT,
    )


@pytest.fixture
def no_images():
    return lambda url: None
