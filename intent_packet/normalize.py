"""
Input Normalizer
Collapses the alias keys callers use for the same logical field into one
canonical record shape. Runs once at ingestion; nothing downstream looks at
raw mappings.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from intent_packet.models import (
    AMOUNT, FUNGIBLE, NON_FUNGIBLE, PERCENTAGE, UNKNOWN_WALLET,
    Allocation, Asset, Beneficiary, ExecutorInfo, OwnerInfo, PacketInput,
)

logger = logging.getLogger(__name__)

NON_FUNGIBLE_TYPES = {"erc721", "erc1155", "nft", "ordinal", "inscription", NON_FUNGIBLE}

ASSET_ALIASES = {
    "id": ("id", "assetId", "asset_id"),
    "chain": ("chain", "network"),
    "kind": ("kind", "assetKind", "asset_kind"),
    "type": ("type", "assetType", "asset_type"),
    "symbol": ("symbol", "ticker"),
    "name": ("name", "collectionName", "collection_name"),
    "balance": ("balance", "rawBalance", "raw_balance"),
    "balance_formatted": ("balanceFormatted", "balance_formatted", "formattedBalance", "formatted_balance"),
    "wallet_address": ("walletAddress", "wallet_address", "wallet", "owner"),
    "wallet_provider": ("walletProvider", "wallet_provider", "provider"),
    "image_url": ("imageUrl", "image_url", "image", "metadata.image", "metadata.image_url", "metadata.imageUrl"),
    "token_id": ("tokenId", "token_id", "inscriptionId", "inscription_id", "metadata.inscriptionId"),
    "contract_address": ("contractAddress", "contract_address"),
}

BENEFICIARY_ALIASES = {
    "id": ("id", "beneficiaryId", "beneficiary_id"),
    "name": ("name", "fullName", "full_name"),
    "wallet_address": ("walletAddress", "wallet_address", "wallet"),
    "resolved_name": ("ensName", "ens_name", "resolvedName", "resolved_name"),
    "phone": ("phone",),
    "email": ("email",),
    "notes": ("notes",),
    "street_address": ("address", "streetAddress", "street_address"),
    "city": ("city",),
    "state": ("state",),
    "zip_code": ("zipCode", "zip_code", "zip"),
}

ALLOCATION_ALIASES = {
    "asset_id": ("assetId", "asset_id"),
    "beneficiary_id": ("beneficiaryId", "beneficiary_id"),
    "kind": ("type", "kind"),
    "percentage": ("percentage", "percent"),
    "amount": ("amount",),
}

OWNER_ALIASES = {
    "full_name": ("ownerFullName", "owner_full_name", "fullName", "full_name"),
    "name": ("ownerName", "owner_name", "name"),
    "street_address": ("ownerAddress", "owner_address", "address", "street_address"),
    "city": ("ownerCity", "owner_city", "city"),
    "state": ("ownerState", "owner_state", "state"),
    "zip_code": ("ownerZipCode", "owner_zip_code", "zipCode", "zip_code"),
    "phone": ("ownerPhone", "owner_phone", "phone"),
    "resolved_name": ("ownerEnsName", "owner_ens_name", "ensName", "resolved_name"),
    "county": ("ownerCounty", "owner_county", "county"),
}

EXECUTOR_ALIASES = {
    "name": ("executorName", "executor_name", "name"),
    "wallet_address": ("executorAddress", "executor_address", "walletAddress", "wallet_address"),
    "resolved_name": ("executorEnsName", "executor_ens_name", "ensName", "resolved_name"),
    "phone": ("executorPhone", "executor_phone", "phone"),
    "email": ("executorEmail", "executor_email", "email"),
    "twitter": ("executorTwitter", "executor_twitter", "twitter"),
    "linkedin": ("executorLinkedIn", "executor_linkedin", "linkedin"),
}


def pick(raw, aliases, default=None):
    """Return the value of the first alias present in raw.

    Dotted aliases reach into nested mappings ("metadata.image"). Empty
    strings count as absent.
    """
    for alias in aliases:
        value = raw
        for part in alias.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                value = None
                break
        if value is None or value == "":
            continue
        return value
    return default


def _text(value):
    if value is None:
        return None
    return str(value)


def _decimal(value):
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def asset_kind(kind, legacy_type):
    if kind in (FUNGIBLE, NON_FUNGIBLE):
        return kind
    if legacy_type and str(legacy_type).lower() in NON_FUNGIBLE_TYPES:
        return NON_FUNGIBLE
    return FUNGIBLE


def normalize_asset(raw):
    """Build an Asset from a raw mapping. Returns None when it has no id."""
    if isinstance(raw, Asset):
        return raw
    asset_id = _text(pick(raw, ASSET_ALIASES["id"]))
    if asset_id is None:
        logger.warning("Skipping asset without an id: %r", raw)
        return None

    chain = _text(pick(raw, ASSET_ALIASES["chain"], "unknown"))
    contract = _text(pick(raw, ASSET_ALIASES["contract_address"]))

    wallet = _text(pick(raw, ASSET_ALIASES["wallet_address"]))
    if not wallet and chain == "bitcoin" and contract:
        wallet = contract
    if not wallet:
        wallet = UNKNOWN_WALLET

    balance = _text(pick(raw, ASSET_ALIASES["balance"]))
    if balance is None or _decimal(balance) is None:
        logger.warning("Asset %s has no usable balance (%r); treating as 0", asset_id, balance)
        balance = "0"
    formatted = _text(pick(raw, ASSET_ALIASES["balance_formatted"], balance))

    legacy_type = pick(raw, ASSET_ALIASES["type"])
    symbol = _text(pick(raw, ASSET_ALIASES["symbol"], ""))
    return Asset(
        id=asset_id,
        chain=chain,
        kind=asset_kind(pick(raw, ASSET_ALIASES["kind"]), legacy_type),
        symbol=symbol,
        name=_text(pick(raw, ASSET_ALIASES["name"], symbol)),
        balance=balance,
        balance_formatted=formatted,
        wallet_address=wallet,
        wallet_provider=_text(pick(raw, ASSET_ALIASES["wallet_provider"])),
        image_url=_text(pick(raw, ASSET_ALIASES["image_url"])),
        token_id=_text(pick(raw, ASSET_ALIASES["token_id"])),
        contract_address=contract,
        asset_type=str(legacy_type).lower() if legacy_type else None,
    )


def normalize_beneficiary(raw):
    if isinstance(raw, Beneficiary):
        return raw
    ben_id = _text(pick(raw, BENEFICIARY_ALIASES["id"]))
    if ben_id is None:
        logger.warning("Skipping beneficiary without an id: %r", raw)
        return None
    fields = {key: _text(pick(raw, aliases)) for key, aliases in BENEFICIARY_ALIASES.items()}
    fields["id"] = ben_id
    fields["name"] = fields["name"] or "Unnamed beneficiary"
    fields["wallet_address"] = fields["wallet_address"] or ""
    return Beneficiary(**fields)


def normalize_allocation(raw):
    """Build an Allocation, or None when the record has no usable value."""
    if isinstance(raw, Allocation):
        return raw
    asset_id = _text(pick(raw, ALLOCATION_ALIASES["asset_id"]))
    beneficiary_id = _text(pick(raw, ALLOCATION_ALIASES["beneficiary_id"]))
    percentage = pick(raw, ALLOCATION_ALIASES["percentage"])
    amount = pick(raw, ALLOCATION_ALIASES["amount"])

    kind = pick(raw, ALLOCATION_ALIASES["kind"])
    if kind not in (PERCENTAGE, AMOUNT):
        kind = PERCENTAGE if percentage is not None else AMOUNT

    raw_value = percentage if kind == PERCENTAGE else amount
    value = _decimal(raw_value) if raw_value is not None else None
    if asset_id is None or beneficiary_id is None or value is None:
        logger.warning("Dropping malformed allocation: %r", raw)
        return None
    return Allocation(
        asset_id=asset_id,
        beneficiary_id=beneficiary_id,
        kind=kind,
        value=value,
        raw_value=str(raw_value).strip(),
    )


def normalize_allocations(raws, assets, beneficiaries):
    """Normalize allocations, dropping any that reference unknown ids."""
    asset_ids = {a.id for a in assets}
    beneficiary_ids = {b.id for b in beneficiaries}
    allocations = []
    for raw in raws or []:
        alloc = normalize_allocation(raw)
        if alloc is None:
            continue
        if alloc.asset_id not in asset_ids:
            logger.warning("Dropping allocation for unknown asset %s", alloc.asset_id)
            continue
        if alloc.beneficiary_id not in beneficiary_ids:
            logger.warning("Dropping allocation for unknown beneficiary %s", alloc.beneficiary_id)
            continue
        allocations.append(alloc)
    return allocations


def normalize_owner(raw):
    if isinstance(raw, OwnerInfo):
        return raw
    raw = raw or {}
    fields = {key: _text(pick(raw, aliases)) for key, aliases in OWNER_ALIASES.items()}
    for key in ("full_name", "name", "street_address", "city", "state", "zip_code", "phone"):
        fields[key] = fields[key] or ""
    return OwnerInfo(**fields)


def normalize_executor(raw):
    if isinstance(raw, ExecutorInfo):
        return raw
    raw = raw or {}
    fields = {key: _text(pick(raw, aliases)) for key, aliases in EXECUTOR_ALIASES.items()}
    fields["name"] = fields["name"] or ""
    return ExecutorInfo(**fields)


def _dedupe(items, label):
    seen = set()
    unique = []
    for item in items:
        if item.id in seen:
            logger.warning("Ignoring duplicate %s id %s", label, item.id)
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def normalize_packet(owner, executor, beneficiaries, allocations, assets,
                     wallet_providers=None, wallet_names=None, connected_wallets=None,
                     key_instructions="", generated_at=None, wallet_groups=None):
    """Normalize a full input bundle into a PacketInput."""
    norm_assets = _dedupe(
        [a for a in (normalize_asset(raw) for raw in assets or []) if a is not None], "asset")
    norm_bens = _dedupe(
        [b for b in (normalize_beneficiary(raw) for raw in beneficiaries or []) if b is not None],
        "beneficiary")
    norm_allocs = normalize_allocations(allocations, norm_assets, norm_bens)

    logger.info("Normalized %d assets, %d beneficiaries, %d allocations",
                len(norm_assets), len(norm_bens), len(norm_allocs))

    return PacketInput(
        owner=normalize_owner(owner),
        executor=normalize_executor(executor),
        beneficiaries=norm_bens,
        allocations=norm_allocs,
        assets=norm_assets,
        generated_at=generated_at or datetime.now(),
        wallet_providers=dict(wallet_providers or {}),
        wallet_names=dict(wallet_names or {}),
        connected_wallets=[str(w) for w in connected_wallets or [] if w],
        wallet_groups=dict(wallet_groups or {}),
        key_instructions=key_instructions or "",
    )
