from decimal import Decimal

from intent_packet.models import AMOUNT, FUNGIBLE, NON_FUNGIBLE, PERCENTAGE, UNKNOWN_WALLET
from intent_packet.normalize import (
    normalize_allocation, normalize_allocations, normalize_asset, normalize_beneficiary,
    normalize_executor, normalize_owner, normalize_packet, pick,
)


def test_pick_first_present_alias_wins():
    raw = {"image_url": "second", "imageUrl": "first"}
    assert pick(raw, ("imageUrl", "image_url")) == "first"
    assert pick(raw, ("missing", "image_url")) == "second"


def test_pick_reaches_into_nested_mappings():
    raw = {"metadata": {"image": "ipfs://nested"}}
    assert pick(raw, ("imageUrl", "metadata.image")) == "ipfs://nested"


def test_pick_skips_empty_strings():
    assert pick({"imageUrl": "", "image": "x"}, ("imageUrl", "image")) == "x"


def test_asset_aliases_resolve_to_one_shape():
    asset = normalize_asset({
        "asset_id": "a1", "chain": "solana", "type": "nft", "symbol": "MAD",
        "collection_name": "Mad Lads", "balance": "1", "image": "https://img/1.png",
        "inscription_id": "abc123i0", "wallet_address": "So1Wallet",
    })
    assert asset.id == "a1"
    assert asset.kind == NON_FUNGIBLE
    assert asset.name == "Mad Lads"
    assert asset.image_url == "https://img/1.png"
    assert asset.token_id == "abc123i0"
    assert asset.wallet_address == "So1Wallet"
    assert asset.wallet_provider is None


def test_asset_kind_from_legacy_type():
    assert normalize_asset({"id": "x", "type": "erc1155", "balance": "1"}).kind == NON_FUNGIBLE
    assert normalize_asset({"id": "x", "type": "erc20", "balance": "1"}).kind == FUNGIBLE
    assert normalize_asset({"id": "x", "kind": "non-fungible", "balance": "1"}).kind == NON_FUNGIBLE


def test_asset_missing_optional_fields_are_none():
    asset = normalize_asset({"id": "x", "chain": "ethereum", "symbol": "ETH", "balance": "2"})
    assert asset.image_url is None
    assert asset.token_id is None
    assert asset.wallet_address == UNKNOWN_WALLET
    assert asset.balance_formatted == "2"
    assert asset.name == "ETH"


def test_bitcoin_asset_falls_back_to_contract_address_for_wallet():
    asset = normalize_asset({"id": "btc", "chain": "bitcoin", "balance": "1",
                             "contractAddress": "bc1qwallet"})
    assert asset.wallet_address == "bc1qwallet"


def test_unparseable_balance_becomes_zero():
    asset = normalize_asset({"id": "x", "balance": "lots"})
    assert asset.balance == "0"


def test_asset_without_id_is_skipped():
    assert normalize_asset({"symbol": "ETH"}) is None


def test_beneficiary_contact_fields():
    ben = normalize_beneficiary({"id": "b", "name": "Ann", "walletAddress": "0x1",
                                 "ensName": "ann.eth", "address": "1 Main St", "city": "Austin",
                                 "zipCode": "73301"})
    assert ben.resolved_name == "ann.eth"
    assert ben.physical_address == "1 Main St, Austin, 73301"
    assert ben.phone is None
    assert ben.label == "Ann (ann.eth)"


def test_allocation_kinds_and_values():
    pct = normalize_allocation({"assetId": "a", "beneficiaryId": "b", "type": "percentage",
                                "percentage": 12.5})
    assert pct.kind == PERCENTAGE
    assert pct.value == Decimal("12.5")
    assert pct.raw_value == "12.5"

    amt = normalize_allocation({"asset_id": "a", "beneficiary_id": "b", "amount": "0.0100"})
    assert amt.kind == AMOUNT
    assert amt.raw_value == "0.0100"


def test_allocation_kind_inferred_from_percentage():
    alloc = normalize_allocation({"assetId": "a", "beneficiaryId": "b", "percentage": 40})
    assert alloc.kind == PERCENTAGE


def test_allocation_without_value_is_dropped():
    assert normalize_allocation({"assetId": "a", "beneficiaryId": "b", "type": "amount"}) is None


def test_orphan_allocations_are_dropped_and_logged(caplog):
    assets = [normalize_asset({"id": "a", "balance": "1"})]
    bens = [normalize_beneficiary({"id": "b", "name": "Ann"})]
    raws = [
        {"assetId": "a", "beneficiaryId": "b", "percentage": 50},
        {"assetId": "a", "beneficiaryId": "ghost", "percentage": 50},
        {"assetId": "nope", "beneficiaryId": "b", "percentage": 50},
    ]
    with caplog.at_level("WARNING", logger="intent_packet"):
        kept = normalize_allocations(raws, assets, bens)
    assert [a.beneficiary_id for a in kept] == ["b"]
    assert "ghost" in caplog.text
    assert "nope" in caplog.text


def test_owner_and_executor_accept_snake_case():
    owner = normalize_owner({"owner_full_name": "Pat Doe", "owner_state": "Ohio"})
    assert owner.display_name == "Pat Doe"
    assert owner.state == "Ohio"
    assert owner.phone == ""

    executor = normalize_executor({"executor_name": "Lee", "executor_twitter": "@lee"})
    assert executor.name == "Lee"
    assert executor.twitter == "@lee"
    assert executor.email is None


def test_normalize_packet_drops_duplicate_ids(packet_args):
    args = dict(packet_args)
    args["assets"] = args["assets"] + [dict(args["assets"][0])]
    packet = normalize_packet(**args)
    assert [a.id for a in packet.assets].count("eth") == 1
    assert packet.resolved_name("0x1111111111111111111111111111111111111111".upper()) == "holder.eth"


def test_asset_keeps_lowercased_legacy_type():
    asset = normalize_asset({"id": "x", "chain": "stacks", "type": "BTC", "balance": "1"})
    assert asset.asset_type == "btc"
    assert asset.is_bitcoin
    assert not normalize_asset({"id": "y", "chain": "ethereum", "balance": "1"}).is_bitcoin


def test_normalize_packet_keeps_wallet_groups(packet_args):
    packet = normalize_packet(**packet_args, wallet_groups={"0xA": "cold-storage"})
    assert packet.wallet_groups == {"0xA": "cold-storage"}
