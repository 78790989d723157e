import random

import pytest

from intent_packet.grouping import (
    group_assets, group_by_chain, wallet_color_index, wallet_group_label,
)
from intent_packet.normalize import normalize_asset


def _asset(asset_id, wallet, chain="ethereum", symbol="ETH", name="Ether", provider=None):
    return normalize_asset({"id": asset_id, "chain": chain, "symbol": symbol, "name": name,
                            "balance": "1", "walletAddress": wallet, "walletProvider": provider})


def test_wallets_sorted_by_provider_then_address():
    assets = [
        _asset("1", "0xB", provider="MetaMask"),
        _asset("2", "0xA", provider="MetaMask"),
        _asset("3", "0xC", provider="Coinbase"),
    ]
    groups = group_assets(assets)
    assert [(g.provider, g.address) for g in groups] == [
        ("Coinbase", "0xC"), ("MetaMask", "0xA"), ("MetaMask", "0xB"),
    ]
    assert [g.color_index for g in groups] == [0, 1, 2]


def test_provider_map_overrides_asset_provider():
    groups = group_assets([_asset("1", "0xA", provider="Rainbow")],
                          wallet_providers={"0xA": "Ledger"})
    assert groups[0].provider == "Ledger"


def test_chain_default_provider():
    groups = group_assets([_asset("1", "bc1q", chain="bitcoin", symbol="BTC"),
                           _asset("2", "So1", chain="solana", symbol="SOL"),
                           _asset("3", "0xZ")])
    assert {g.address: g.provider for g in groups} == {
        "bc1q": "Xverse", "So1": "Solana Wallet", "0xZ": "Unknown Wallet",
    }


def test_chains_and_assets_sorted_within_wallet():
    assets = [
        _asset("1", "0xA", chain="polygon", symbol="MATIC", name="Polygon"),
        _asset("2", "0xA", chain="ethereum", symbol="USDC", name="USD Coin"),
        _asset("3", "0xA", chain="ethereum", symbol="DAI", name="Dai"),
        _asset("4", "0xA", chain="base", symbol="ETH", name="Ether"),
        _asset("5", "0xA", chain="ethereum", symbol="DAI", name="Dai Bridged"),
    ]
    [group] = group_assets(assets)
    assert [c.chain for c in group.chains] == ["base", "ethereum", "polygon"]
    ethereum = group.chains[1]
    assert [(a.symbol, a.name) for a in ethereum.assets] == [
        ("DAI", "Dai"), ("DAI", "Dai Bridged"), ("USDC", "USD Coin"),
    ]


def test_grouping_ignores_input_order():
    assets = [_asset(str(i), f"0x{i % 4}", chain=["base", "ethereum"][i % 2],
                     symbol=f"T{i}", provider=["MetaMask", "Rainbow"][i % 3 % 2])
              for i in range(20)]
    expected = group_assets(assets)
    shuffled = list(assets)
    random.Random(7).shuffle(shuffled)
    actual = group_assets(shuffled)
    assert [(g.address, g.provider, g.color_index) for g in actual] == \
        [(g.address, g.provider, g.color_index) for g in expected]
    assert [[a.id for a in g.assets] for g in actual] == [[a.id for a in g.assets] for g in expected]


def test_color_index_cycles_through_palette():
    assets = [_asset(str(i), f"0x{i:02d}", provider="MetaMask") for i in range(12)]
    groups = group_assets(assets)
    assert [g.color_index for g in groups] == [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 0, 1]


def test_wallet_color_index_is_pure():
    assert wallet_color_index(0) == 0
    assert wallet_color_index(13) == 3
    assert wallet_color_index(5, palette_size=3) == 2
    with pytest.raises(ValueError):
        wallet_color_index(1, palette_size=0)


def test_resolved_name_lookup_ignores_case():
    [group] = group_assets([_asset("1", "0xAbC")], wallet_names={"0xabc": "me.eth"})
    assert group.resolved_name == "me.eth"


def test_group_by_chain_spans_wallets():
    chains = group_by_chain([
        _asset("1", "0xB", chain="ethereum", symbol="USDC"),
        _asset("2", "0xA", chain="base", symbol="ETH"),
        _asset("3", "0xA", chain="ethereum", symbol="DAI"),
    ])
    assert [(c.chain, [a.id for a in c.assets]) for c in chains] == [
        ("base", ["2"]), ("ethereum", ["3", "1"]),
    ]


def test_unknown_wallet_group_sorts_last_without_number():
    assets = [
        _asset("1", "0xB", provider="MetaMask"),
        normalize_asset({"id": "2", "chain": "ethereum", "symbol": "DUST", "balance": "1"}),
        _asset("3", "0xA", provider="Zerion"),
    ]
    groups = group_assets(assets)
    assert [(g.address, g.number) for g in groups] == [("0xB", 1), ("0xA", 2), ("Unknown", None)]
    assert groups[-1].provider == "Unknown Wallet"
    assert groups[-1].color_index == 2


def test_wallet_group_label():
    groups = {"0xAbC": "long-term", "0xdef": "Active-Trading", "0x123": "vacation"}
    assert wallet_group_label("0xabc", groups) == "Long-term"
    assert wallet_group_label("0xDEF", groups) == "Active trading"
    assert wallet_group_label("0x123", groups) == "Unassigned"
    assert wallet_group_label("0x999", groups) == "Unassigned"
    assert wallet_group_label("0x999", None) == "Unassigned"
