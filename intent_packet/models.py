"""
Packet Data Model
Canonical records consumed by the grouping, layout and rendering stages.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from intent_packet import config

FUNGIBLE = "fungible"
NON_FUNGIBLE = "non-fungible"

PERCENTAGE = "percentage"
AMOUNT = "amount"

UNKNOWN_WALLET = "Unknown"
BITCOIN_TYPES = ("btc", "ordinal")


def lookup_name(names, address):
    """Value keyed by a wallet address; exact match first, then ignoring case."""
    if not address:
        return None
    if address in names:
        return names[address]
    lowered = address.lower()
    for addr, name in names.items():
        if addr.lower() == lowered:
            return name
    return None


@dataclass(frozen=True)
class Asset:
    id: str
    chain: str
    kind: str
    symbol: str
    name: str
    balance: str
    balance_formatted: str
    wallet_address: str = UNKNOWN_WALLET
    wallet_provider: Optional[str] = None
    image_url: Optional[str] = None
    token_id: Optional[str] = None
    contract_address: Optional[str] = None
    asset_type: Optional[str] = None

    @property
    def is_non_fungible(self) -> bool:
        return self.kind == NON_FUNGIBLE

    @property
    def is_bitcoin(self) -> bool:
        return self.chain == "bitcoin" or self.asset_type in BITCOIN_TYPES


@dataclass(frozen=True)
class Beneficiary:
    id: str
    name: str
    wallet_address: str = ""
    resolved_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    @property
    def label(self) -> str:
        """Name as used on allocation lines, with the resolved name if any."""
        if self.resolved_name and self.resolved_name != self.name:
            return f"{self.name} ({self.resolved_name})"
        return self.name

    @property
    def physical_address(self) -> str:
        parts = [self.street_address, self.city, self.state, self.zip_code]
        return ", ".join(p for p in parts if p)


@dataclass(frozen=True)
class Allocation:
    asset_id: str
    beneficiary_id: str
    kind: str
    value: Decimal
    raw_value: str


@dataclass
class OwnerInfo:
    full_name: str = ""
    name: str = ""
    street_address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    resolved_name: Optional[str] = None
    county: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.name


@dataclass
class ExecutorInfo:
    name: str = ""
    wallet_address: Optional[str] = None
    resolved_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


@dataclass
class PacketInput:
    owner: OwnerInfo
    executor: ExecutorInfo
    beneficiaries: List[Beneficiary]
    allocations: List[Allocation]
    assets: List[Asset]
    generated_at: datetime
    wallet_providers: Dict[str, str] = field(default_factory=dict)
    wallet_names: Dict[str, str] = field(default_factory=dict)
    connected_wallets: List[str] = field(default_factory=list)
    wallet_groups: Dict[str, str] = field(default_factory=dict)
    key_instructions: str = ""

    def beneficiary(self, beneficiary_id: str) -> Optional[Beneficiary]:
        for ben in self.beneficiaries:
            if ben.id == beneficiary_id:
                return ben
        return None

    def allocations_for(self, asset_id: str) -> List[Allocation]:
        return [a for a in self.allocations if a.asset_id == asset_id]

    def resolved_name(self, address: str) -> Optional[str]:
        return lookup_name(self.wallet_names, address)


@dataclass
class ChainGroup:
    chain: str
    assets: List[Asset] = field(default_factory=list)


@dataclass
class WalletGroup:
    address: str
    provider: str
    color_index: int
    number: Optional[int] = None
    resolved_name: Optional[str] = None
    chains: List[ChainGroup] = field(default_factory=list)

    @property
    def assets(self) -> List[Asset]:
        return [asset for chain in self.chains for asset in chain.assets]


@dataclass(frozen=True)
class LayoutContext:
    """Current page and vertical cursor, passed into and returned by every draw call."""
    page: int
    y: float
    page_width: float = config.PAGE_WIDTH
    page_height: float = config.PAGE_HEIGHT
    margin_top: float = config.PAGE_HEIGHT - config.TOP_Y
    margin_bottom: float = config.MIN_Y
    margin_left: float = config.MARGIN
    margin_right: float = config.MARGIN

    @property
    def top(self) -> float:
        return self.page_height - self.margin_top

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def remaining(self) -> float:
        return self.y - self.margin_bottom

    def advance(self, dy: float) -> "LayoutContext":
        """Move the cursor down by dy points."""
        return replace(self, y=self.y - dy)
