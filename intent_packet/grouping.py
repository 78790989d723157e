"""
Asset Grouping
Wallet -> chain -> asset tree with a fixed, reproducible sort order.
"""
from intent_packet import config
from intent_packet.models import UNKNOWN_WALLET, ChainGroup, WalletGroup, lookup_name

CHAIN_DEFAULT_PROVIDERS = {
    "bitcoin": "Xverse",
    "solana": "Solana Wallet",
}
UNKNOWN_PROVIDER = "Unknown Wallet"

UNASSIGNED = "unassigned"
WALLET_GROUP_LABELS = {
    "long-term": "Long-term",
    "active-trading": "Active trading",
    "cold-storage": "Cold storage",
    UNASSIGNED: "Unassigned",
}


def wallet_color_index(position, palette_size=config.PALETTE_SIZE):
    """Palette slot for the wallet at a given position in the sorted list."""
    if palette_size <= 0:
        raise ValueError("palette_size must be positive")
    return position % palette_size


def asset_sort_key(asset):
    return (asset.symbol, asset.name, asset.id)


def wallet_provider(address, assets, wallet_providers):
    """Provider label for a wallet: explicit map, then the assets, then a chain default."""
    if wallet_providers.get(address):
        return wallet_providers[address]
    ordered = sorted(assets, key=lambda a: (a.chain,) + asset_sort_key(a))
    for asset in ordered:
        if asset.wallet_provider:
            return asset.wallet_provider
    return CHAIN_DEFAULT_PROVIDERS.get(ordered[0].chain, UNKNOWN_PROVIDER)


def group_by_chain(assets):
    """Chain groups in ascending chain order, assets sorted by (symbol, name)."""
    by_chain = {}
    for asset in assets:
        by_chain.setdefault(asset.chain, []).append(asset)
    return [
        ChainGroup(chain=chain, assets=sorted(by_chain[chain], key=asset_sort_key))
        for chain in sorted(by_chain)
    ]


def wallet_group_label(address, wallet_groups):
    """Display label for the owner's grouping of a wallet; Unassigned when not set."""
    key = lookup_name(wallet_groups or {}, address)
    return WALLET_GROUP_LABELS.get(str(key).strip().lower() if key else UNASSIGNED, "Unassigned")


def group_assets(assets, wallet_providers=None, wallet_names=None):
    """
    Partition assets by wallet, then chain.

    Wallets sort by (provider, address), with assets of no known wallet
    gathered in a last, unnumbered group; chains by identifier; assets by
    (symbol, name). Numbers and color indices follow the final wallet position.
    """
    wallet_providers = wallet_providers or {}
    wallet_names = wallet_names or {}

    by_wallet = {}
    for asset in assets:
        by_wallet.setdefault(asset.wallet_address, []).append(asset)
    providers = {
        address: wallet_provider(address, wallet_assets, wallet_providers)
        for address, wallet_assets in by_wallet.items()
    }

    ordered = sorted(by_wallet,
                     key=lambda addr: (addr == UNKNOWN_WALLET, providers[addr], addr))

    groups = []
    for position, address in enumerate(ordered):
        groups.append(WalletGroup(
            address=address,
            provider=providers[address],
            color_index=wallet_color_index(position),
            number=None if address == UNKNOWN_WALLET else position + 1,
            resolved_name=lookup_name(wallet_names, address),
            chains=group_by_chain(by_wallet[address]),
        ))
    return groups
