"""
Packet Composer
Lays out the fixed sequence of packet sections on top of the renderer.
"""
import logging
from datetime import timezone
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, localcontext

from intent_packet import config
from intent_packet.grouping import (
    group_assets, group_by_chain, wallet_color_index, wallet_group_label,
)
from intent_packet.models import PERCENTAGE, UNKNOWN_WALLET
from intent_packet.text_layout import (
    draw_section_band, draw_wrapped, ensure_space, fit_text, sanitize_text, text_width,
)

logger = logging.getLogger(__name__)

MARGIN = config.MARGIN
LINE = config.LINE_HEIGHT
SECTION_GAP = config.SECTION_SPACING

NFT_TAG = "[NFT - NON-FUNGIBLE, CANNOT BE SPLIT]"
SIX_PLACES = Decimal("0.000001")
SATS_PER_BTC = Decimal(100000000)

LEGAL_NOTICES = [
    ("UNIFORM DIGITAL ASSET INTENT PACKET",
     "This document is a Uniform Digital Asset Intent Packet designed to work in all 50 U.S. "
     "states. This document supplements, but does not replace, a formal will or estate plan."),
    ("EXECUTOR PACKET FRAMING",
     "This document can be used in two ways. 1. As a Standalone Letter of Instruction: it provides "
     "the executor with the information needed to locate and access the digital assets described "
     "herein. 2. As Exhibit A to a Formal Will: reference it in your will with language such as "
     "\"I direct my executor to follow the instructions contained in Exhibit A, my Digital Asset "
     "Intent Packet, dated [DATE].\""),
    ("RUFADAA REFERENCE",
     "This document references concepts from the Revised Uniform Fiduciary Access to Digital "
     "Assets Act (RUFADAA), adopted in most U.S. states. It does not over-claim RUFADAA authority "
     "but provides instructions aligned with its principles. The executor should consult legal "
     "counsel on how RUFADAA applies in the state of jurisdiction."),
    ("GENERAL DISCLAIMER",
     "This document is provided for informational purposes only and does not constitute legal, "
     "financial, or tax advice. It does not create legal obligations or guarantees. The owner of "
     "these assets is solely responsible for the accuracy of the information provided. "
     f"{config.PRODUCT_NAME} is not a legal service provider, custodian, or executor of these "
     "instructions. Keep this document in a secure location and share it only with trusted parties."),
]

BITCOIN_GUIDANCE = [
    "1. Bitcoin wallets may contain both regular Bitcoin (BTC) and Ordinals (inscribed SATs).",
    "2. Access to Bitcoin wallets typically requires:",
    "   - Private keys or seed phrases (12/24 word mnemonic)",
    "   - Wallet software (e.g., Xverse, Electrum, Bitcoin Core)",
    "   - Hardware wallet devices (if applicable)",
    "3. Ordinals (inscribed SATs) require special handling:",
    "   - Use Ordinal-compatible wallets (e.g., Xverse, Hiro Wallet)",
    "   - Transferring Bitcoin may move Ordinals - exercise caution",
    "4. Test transactions are recommended before moving large amounts.",
    "5. Bitcoin transactions are irreversible - verify all addresses carefully.",
]

NFT_GUIDANCE = [
    "1. NFTs are unique digital assets that cannot be split or divided.",
    "2. Each NFT is allocated to a specific beneficiary as a whole unit.",
    "3. Marketplaces: OpenSea, Blur, Magic Eden, LooksRare, Rarible.",
    "4. Some NFTs generate ongoing creator royalties; check the contract for the royalty rate.",
    "5. NFT values are highly volatile; consider professional appraisal for valuable collections.",
    "6. Transfers are blockchain transactions; gas fees apply and recipient addresses must be verified.",
    "7. NFTs are stored on-chain, but access requires control of the holding wallet.",
]

FOOTER_DISCLAIMER = ("This document is informational only and does not constitute legal, "
                     "financial, or tax advice.")


def derived_quantity(balance, percentage):
    """balance * percentage / 100, rounded half-up to six decimal places."""
    with localcontext() as ctx:
        ctx.prec = 80
        value = Decimal(balance) * percentage / Decimal(100)
        return f"{value.quantize(SIX_PLACES, rounding=ROUND_HALF_UP):f}"


def sats(btc_amount):
    """Whole satoshis in a BTC amount, truncated, with thousands separators."""
    with localcontext() as ctx:
        ctx.prec = 80
        value = (Decimal(btc_amount) * SATS_PER_BTC).to_integral_value(rounding=ROUND_FLOOR)
    return f"{int(value):,}"


def balance_text(asset):
    if asset.is_bitcoin and not asset.is_non_fungible:
        return f"Balance: {asset.balance_formatted} ({sats(asset.balance)} SATs)"
    return f"Balance: {asset.balance_formatted}"


def allocation_text(asset, allocation, beneficiary):
    """One allocation line. Non-fungible assets always read as a whole transfer."""
    who = beneficiary.label
    if asset.is_non_fungible:
        token = f" (Token ID: {asset.token_id})" if asset.token_id else ""
        return f"-> Entire asset transferred to {who}: {asset.name}{token}"
    if allocation.kind == PERCENTAGE:
        amount = derived_quantity(asset.balance, allocation.value)
        if asset.is_bitcoin:
            return (f"-> {who} receives: {allocation.raw_value}% "
                    f"({amount} {asset.symbol} = {sats(amount)} SATs)")
        return f"-> {who} receives: {allocation.raw_value}% ({amount} {asset.symbol})"
    if asset.is_bitcoin:
        return (f"-> {who} receives: {allocation.raw_value} {asset.symbol} "
                f"({sats(allocation.value)} SATs)")
    return f"-> {who} receives: {allocation.raw_value} {asset.symbol}"


def document_number(generated_at):
    """DOC- plus the last eight digits of the epoch milliseconds; naive times are UTC."""
    if generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)
    millis = int(generated_at.timestamp() * 1000)
    return f"DOC-{str(millis)[-8:]}"


def human_date(generated_at):
    return f"{generated_at:%B} {generated_at.day}, {generated_at.year}"


def _or_missing(value):
    return value if value else config.NOT_PROVIDED


class PacketComposer:
    def __init__(self, packet, renderer, images=None):
        self.packet = packet
        self.renderer = renderer
        self.images = images or {}
        self.groups = group_assets(packet.assets, packet.wallet_providers, packet.wallet_names)
        self.doc_number = document_number(packet.generated_at)
        self.date_text = human_date(packet.generated_at)

    # ─── CONTENT ELEMENTS ───

    def write(self, ctx, text, indent=0, size=11, bold=False, color=config.CHARCOAL):
        return draw_wrapped(self.renderer, ctx, text, x=MARGIN + indent, size=size,
                            bold=bold, color=color)

    def write_centered(self, ctx, text, size, bold=False, color=config.INK):
        font = config.FONT_BOLD if bold else config.FONT_REGULAR
        text = fit_text(sanitize_text(text), ctx.content_width, font, size)
        ctx = ensure_space(self.renderer, ctx, size)
        x = (ctx.page_width - text_width(text, font, size)) / 2
        self.renderer.text(ctx, max(x, ctx.margin_left), ctx.y, text, size=size, bold=bold,
                           color=color)
        return ctx.advance(size + 2)

    def field(self, ctx, label, value, indent=0, size=11, color=config.CHARCOAL):
        return self.write(ctx, f"{label}: {_or_missing(value)}", indent=indent, size=size,
                          color=color)

    def signature_line(self, ctx, label, line_len=220):
        """Label followed by a ruled line to sign on"""
        ctx = ensure_space(self.renderer, ctx, LINE * 2)
        label = sanitize_text(label)
        self.renderer.text(ctx, MARGIN, ctx.y, label, size=11, color=config.CHARCOAL)
        x = MARGIN + text_width(label, config.FONT_REGULAR, 11) + 6
        self.renderer.line(ctx, x, ctx.y - 2, x + line_len, ctx.y - 2, config.SLATE, 0.75)
        return ctx.advance(LINE * 2)

    def badge(self, ctx, x, label, color):
        """Small filled pill with white label, baseline-aligned at the cursor"""
        w = text_width(label, config.FONT_BOLD, 7) + 10
        self.renderer.fill_rect(ctx, x, ctx.y - 3, w, 12, color)
        self.renderer.text(ctx, x + 5, ctx.y, label, size=7, bold=True, color=config.WHITE)
        return w

    # ─── WALLET DIRECTORY ───

    def wallet_directory(self):
        """
        (number, address, provider, color index, resolved name) for every
        connected wallet. Numbers match the executive summary; connected
        wallets holding no listed assets follow the grouped ones.
        """
        entries = [
            (g.number, g.address, g.provider, g.color_index, g.resolved_name)
            for g in self.groups if g.number is not None
        ]
        seen = {g.address.lower() for g in self.groups}
        number = len(entries) + 1
        position = len(self.groups)
        for address in self.packet.connected_wallets:
            if address.lower() in seen:
                continue
            seen.add(address.lower())
            provider = self.packet.wallet_providers.get(address, "Connected Wallet")
            entries.append((number, address, provider, wallet_color_index(position),
                            self.packet.resolved_name(address)))
            number += 1
            position += 1
        return entries

    # ═══════════════════════════════════════════════════
    # SECTIONS
    # ═══════════════════════════════════════════════════

    def section_title(self, ctx):
        """Cover: title band, owner and packet overview"""
        r = self.renderer
        r.fill_rect(ctx, MARGIN - 10, ctx.y + 20, ctx.content_width + 20, 6, config.TITLE)
        ctx = ctx.advance(40)

        band_h = 56
        r.fill_rect(ctx, MARGIN - 10, ctx.y - band_h + 22, ctx.content_width + 20, band_h,
                    config.TITLE, opacity=config.BAND_OPACITY)
        ctx = self.write_centered(ctx, config.DOCUMENT_TITLE, 20, bold=True, color=config.TITLE)
        ctx = ctx.advance(8)
        ctx = self.write_centered(ctx, f"({config.PRODUCT_NAME} Instructions)", 14,
                                  color=config.SLATE)
        ctx = ctx.advance(40)

        r.line(ctx, MARGIN + 50, ctx.y, ctx.page_width - MARGIN - 50, ctx.y, config.TITLE, 2)
        ctx = ctx.advance(50)

        owner = self.packet.owner
        ctx = self.write_centered(ctx, owner.display_name or "Owner", 20, bold=True,
                                  color=config.CHARCOAL)
        if owner.resolved_name:
            ctx = ctx.advance(6)
            ctx = self.write_centered(ctx, owner.resolved_name, 14, color=config.ENS)
        ctx = ctx.advance(50)

        n_assets = len(self.packet.assets)
        overview = [
            ("Date Generated", self.date_text),
            ("Document Number", self.doc_number),
            ("Total Assets", f"{n_assets} asset{'' if n_assets == 1 else 's'}"),
            ("Total Beneficiaries", str(len(self.packet.beneficiaries))),
            ("Connected Wallets", str(len(self.wallet_directory()))),
        ]
        for label, value in overview:
            ctx = self.write(ctx, f"{label}:", indent=70, size=11, color=config.MUTED)
            ctx = self.write(ctx, value, indent=70, size=11, bold=True, color=config.INK)
            ctx = ctx.advance(LINE * 0.75)

        ctx = ctx.advance(LINE * 2)
        ctx = self.write(ctx, "CONFIDENTIAL DOCUMENT", size=13, bold=True, color=config.INK)
        ctx = ctx.advance(LINE * 0.5)
        ctx = self.write(ctx, "This document contains sensitive financial information. Keep secure "
                              "and share only with authorized parties.", size=10,
                         color=config.SLATE)
        return self.renderer.new_page(ctx)

    def section_disclaimer(self, ctx):
        """Legal disclaimer and generation context"""
        ctx = draw_section_band(self.renderer, ctx, "Legal Disclaimer and Important Notice",
                                config.WARNING)
        for heading, body in LEGAL_NOTICES:
            ctx = ensure_space(self.renderer, ctx, LINE * 3)
            ctx = self.write(ctx, heading, size=11, bold=True, color=config.HEADER)
            ctx = ctx.advance(LINE * 0.4)
            ctx = self.write(ctx, body, size=10, color=config.INK)
            ctx = ctx.advance(LINE)
        ctx = self.write(ctx, "RECOMMENDATION: For maximum legal protection, use this document as "
                              "Exhibit A to a formal will, and consult an estate attorney about the "
                              "best approach for your situation.", size=10, bold=True,
                         color=config.WARNING)
        ctx = ctx.advance(LINE * 0.5)
        ctx = self.write(ctx, f"Prepared for {self.packet.owner.display_name or 'the Owner'} on "
                              f"{self.date_text}. Document Number: {self.doc_number}.",
                         size=9, color=config.MUTED)
        return ctx.advance(SECTION_GAP)

    def section_owner(self, ctx):
        owner = self.packet.owner
        ctx = draw_section_band(self.renderer, ctx, "Owner Information", config.HEADER)
        ctx = self.field(ctx, "Full Legal Name", owner.display_name)
        if owner.resolved_name:
            ctx = self.field(ctx, "Resolved Name", owner.resolved_name, color=config.ENS)
        ctx = self.field(ctx, "Address", owner.street_address)
        locality = " ".join(p for p in [", ".join(p for p in [owner.city, owner.state] if p),
                                        owner.zip_code] if p)
        ctx = self.field(ctx, "City, State ZIP", locality)
        ctx = self.field(ctx, "Phone", owner.phone)
        return ctx.advance(SECTION_GAP)

    def section_wallets(self, ctx):
        """Connected wallets with verification badge and palette color"""
        r = self.renderer
        ctx = draw_section_band(r, ctx, "Connected Wallets & Verification Status", config.SUCCESS)
        ctx = self.write(ctx, "All wallet addresses used in this document with signature "
                              "verification status:", size=10, color=config.SLATE)
        ctx = ctx.advance(LINE * 0.5)

        entries = self.wallet_directory()
        if not entries:
            ctx = self.write(ctx, "No connected wallets.", indent=20, size=10, color=config.MUTED)
        for number, address, provider, color_index, resolved in entries:
            color = config.WALLET_COLORS[color_index]
            ctx = ensure_space(r, ctx, 60)
            r.fill_rect(ctx, MARGIN, ctx.y - 3, 8, 12, color)
            badge_w = text_width("VERIFIED", config.FONT_BOLD, 7) + 10
            heading = fit_text(sanitize_text(f"Wallet {number} - {provider}"),
                               ctx.content_width - 24 - badge_w, config.FONT_BOLD, 12)
            r.text(ctx, MARGIN + 14, ctx.y, heading, size=12, bold=True, color=config.INK)
            badge_x = MARGIN + 24 + text_width(heading, config.FONT_BOLD, 12)
            self.badge(ctx, badge_x, "VERIFIED", color)
            ctx = ctx.advance(LINE)
            if resolved and resolved != address:
                ctx = self.write(ctx, resolved, indent=20, size=11, bold=True, color=config.ENS)
            ctx = self.write(ctx, address, indent=20, size=10, color=config.CHARCOAL)
            ctx = ctx.advance(LINE * 0.5)
        return ctx.advance(SECTION_GAP)

    def section_beneficiary_wallets(self, ctx):
        ctx = draw_section_band(self.renderer, ctx, "Beneficiary Wallets", config.BENEFICIARY)
        with_wallets = [b for b in self.packet.beneficiaries if b.wallet_address]
        if not with_wallets:
            ctx = self.write(ctx, "No beneficiary wallets provided.", size=10, color=config.MUTED)
        for ben in with_wallets:
            ctx = ensure_space(self.renderer, ctx, 50)
            ctx = self.write(ctx, f"{ben.name}:", size=12, bold=True, color=config.INK)
            if ben.resolved_name:
                ctx = self.field(ctx, "Resolved Name", ben.resolved_name, indent=20, size=11,
                                 color=config.ENS)
            ctx = self.field(ctx, "Wallet Address", ben.wallet_address, indent=20, size=10)
            ctx = ctx.advance(LINE * 0.5)
        return ctx.advance(SECTION_GAP)

    def section_executor(self, ctx):
        executor = self.packet.executor
        ctx = draw_section_band(self.renderer, ctx, "Executor Information", config.HEADER)
        ctx = self.field(ctx, "Full Name", executor.name)
        resolved = executor.resolved_name or self.packet.resolved_name(executor.wallet_address)
        if resolved:
            ctx = self.field(ctx, "Resolved Name", resolved, color=config.ENS)
        ctx = self.field(ctx, "Wallet Address", executor.wallet_address)
        ctx = self.field(ctx, "Phone", executor.phone)
        ctx = self.field(ctx, "Email", executor.email)
        if executor.twitter:
            ctx = self.field(ctx, "Twitter/X", executor.twitter)
        if executor.linkedin:
            ctx = self.field(ctx, "LinkedIn", executor.linkedin)
        return ctx.advance(SECTION_GAP)

    def section_beneficiaries(self, ctx):
        ctx = draw_section_band(self.renderer, ctx, "Beneficiaries", config.BENEFICIARY)
        if not self.packet.beneficiaries:
            ctx = self.write(ctx, "No beneficiaries designated.", size=10, color=config.MUTED)
        for index, ben in enumerate(self.packet.beneficiaries, start=1):
            ctx = ensure_space(self.renderer, ctx, 55)
            ctx = self.write(ctx, f"{index}. {ben.name}", size=13, bold=True, color=config.INK)
            if ben.resolved_name:
                ctx = self.field(ctx, "Resolved Name", ben.resolved_name, indent=20, size=11,
                                 color=config.ENS)
            ctx = self.field(ctx, "Wallet Address", ben.wallet_address, indent=20, size=10)
            if ben.physical_address:
                ctx = self.field(ctx, "Physical Address", ben.physical_address, indent=20, size=10)
            if ben.phone:
                ctx = self.field(ctx, "Phone", ben.phone, indent=20, size=10, color=config.MUTED)
            if ben.email:
                ctx = self.field(ctx, "Email", ben.email, indent=20, size=10, color=config.MUTED)
            if ben.notes:
                ctx = self.field(ctx, "Notes", ben.notes, indent=20, size=9, color=config.MUTED)
            ctx = ctx.advance(LINE * 0.5)
        return ctx.advance(SECTION_GAP)

    # ─── ASSET BLOCKS ───

    def draw_allocations(self, ctx, asset, indent=40, size=9):
        for alloc in self.packet.allocations_for(asset.id):
            ben = self.packet.beneficiary(alloc.beneficiary_id)
            if ben is None:
                continue
            ctx = self.write(ctx, allocation_text(asset, alloc, ben), indent=indent, size=size,
                             color=config.INK)
            ctx = ctx.advance(4)
        return ctx

    def draw_nft_block(self, ctx, asset, image):
        """
        Image slot beside the asset text. With no image the slot holds a framed
        placeholder, so both paths end at the same cursor position.
        """
        r = self.renderer
        ctx = ensure_space(r, ctx, config.NFT_BLOCK_HEIGHT + LINE)
        start = ctx
        size = config.NFT_IMAGE_SIZE
        slot_x = MARGIN + 30
        slot_y = start.y + 8 - size

        if image is not None:
            r.image(ctx, image, slot_x, slot_y, size, size)
        else:
            r.stroke_rect(ctx, slot_x, slot_y, size, size, config.RULE_GRAY, 0.75)
            label = "NO PREVIEW"
            r.text(ctx, slot_x + (size - text_width(label, config.FONT_REGULAR, 6)) / 2,
                   slot_y + size / 2 - 2, label, size=6, color=config.MUTED)

        text_x = slot_x + size + 15
        ctx = draw_wrapped(r, ctx, f"{asset.symbol} ({asset.name}) {NFT_TAG}", x=text_x,
                           size=10, bold=True, color=config.INK)
        ctx = ctx.advance(4)
        ctx = draw_wrapped(r, ctx, f"Token ID: {asset.token_id or 'N/A'}", x=text_x, size=9,
                           color=config.SLATE)
        if asset.contract_address:
            ctx = draw_wrapped(r, ctx, f"Contract: {asset.contract_address}", x=text_x, size=8,
                               color=config.MUTED)

        if ctx.page != start.page:
            return ctx
        return start.advance(max(start.y - ctx.y, config.NFT_BLOCK_HEIGHT))

    def draw_fungible_block(self, ctx, asset):
        ctx = ensure_space(self.renderer, ctx, 35)
        ctx = self.write(ctx, f"{asset.symbol} ({asset.name})", indent=30, size=11, bold=True,
                         color=config.INK)
        return self.write(ctx, balance_text(asset), indent=30, size=10,
                          color=config.SLATE)

    def section_summary(self, ctx):
        """Allocations walked wallet -> chain -> asset -> beneficiary"""
        r = self.renderer
        ctx = draw_section_band(r, ctx, "Executive Summary: Asset Allocations by Wallet & Chain",
                                config.TITLE)
        if not self.packet.allocations:
            ctx = self.write(ctx, "No asset allocations recorded.", size=10, color=config.MUTED)
            return ctx.advance(SECTION_GAP)

        for group in self.groups:
            color = config.WALLET_COLORS[group.color_index]
            ctx = ensure_space(r, ctx, 80)
            r.fill_rect(ctx, MARGIN - 8, ctx.y - 6, ctx.content_width + 16, 22, color,
                        opacity=config.BAND_OPACITY)
            r.fill_rect(ctx, MARGIN - 8, ctx.y - 6, 3, 22, color)
            title = f"WALLET {group.number}" if group.number is not None else "UNKNOWN WALLET"
            r.text(ctx, MARGIN, ctx.y, title, size=14, bold=True, color=color)
            ctx = ctx.advance(LINE + 4)
            group_label = wallet_group_label(group.address, self.packet.wallet_groups)
            ctx = self.write(ctx, f"Group: {group_label}", indent=20, size=11, bold=True,
                             color=config.ENS)
            ctx = self.write(ctx, f"Wallet App: {group.provider}", indent=20, size=12, bold=True,
                             color=config.INK)
            ctx = self.write(ctx, group.address, indent=20, size=10)
            if group.resolved_name and group.resolved_name != group.address:
                ctx = self.write(ctx, f"Resolves to: {group.resolved_name}", indent=20, size=11,
                                 bold=True, color=config.ENS)
            ctx = ctx.advance(LINE * 0.5)

            for chain in group.chains:
                ctx = ensure_space(r, ctx, 45)
                ctx = self.write(ctx, f"CHAIN: {chain.chain.upper()}", indent=20, size=12,
                                 bold=True, color=config.INK)
                ctx = ctx.advance(4)
                for asset in chain.assets:
                    if not self.packet.allocations_for(asset.id):
                        continue
                    if asset.is_non_fungible:
                        ctx = self.draw_nft_block(ctx, asset, self.images.get(asset.id))
                    else:
                        ctx = self.draw_fungible_block(ctx, asset)
                    ctx = self.draw_allocations(ctx, asset)
                    ctx = ctx.advance(6)
                ctx = ctx.advance(LINE * 0.5)
            ctx = ctx.advance(SECTION_GAP * 0.5)
        return ctx.advance(SECTION_GAP)

    def section_by_chain(self, ctx):
        """Flat restatement of every allocation, chain-major"""
        ctx = draw_section_band(self.renderer, ctx, "Detailed Asset Allocations (By Chain)",
                                config.TITLE)
        chains = [
            (chain.chain, [a for a in chain.assets if self.packet.allocations_for(a.id)])
            for chain in group_by_chain(self.packet.assets)
        ]
        chains = [(name, assets) for name, assets in chains if assets]
        if not chains:
            ctx = self.write(ctx, "No asset allocations recorded.", size=10, color=config.MUTED)
            return ctx.advance(SECTION_GAP)

        for chain, assets in chains:
            ctx = ensure_space(self.renderer, ctx, 55)
            ctx = self.write(ctx, f"Chain: {chain.upper()}", size=13, bold=True, color=config.INK)
            ctx = ctx.advance(4)
            for asset in assets:
                ctx = ensure_space(self.renderer, ctx, 45)
                tag = " [NFT - NON-FUNGIBLE]" if asset.is_non_fungible else ""
                ctx = self.write(ctx, f"{asset.symbol} ({asset.name}){tag}", indent=20, size=12,
                                 bold=True, color=config.INK)
                resolved = self.packet.resolved_name(asset.wallet_address)
                wallet = (f"{resolved} ({asset.wallet_address})"
                          if resolved and resolved != asset.wallet_address else asset.wallet_address)
                ctx = self.write(ctx, f"From Wallet: {wallet}", indent=20, size=10,
                                 color=config.MUTED)
                if asset.is_non_fungible:
                    ctx = self.write(ctx, f"Token ID: {asset.token_id or 'N/A'}", indent=20,
                                     size=10, color=config.SLATE)
                else:
                    ctx = self.write(ctx, balance_text(asset), indent=20, size=10,
                                     color=config.SLATE)
                ctx = self.draw_allocations(ctx, asset, indent=40, size=10)
                ctx = ctx.advance(5)
            ctx = ctx.advance(LINE * 0.5)
        return ctx.advance(SECTION_GAP)

    def section_guidance(self, ctx):
        """Bitcoin and NFT notes, only for packets holding those assets"""
        assets = self.packet.assets
        blocks = []
        if any(a.is_bitcoin for a in assets):
            blocks.append(("Bitcoin Wallet Recovery Instructions", config.BITCOIN,
                           "IMPORTANT: Bitcoin wallets require special handling. The following "
                           "information is critical for accessing Bitcoin assets:",
                           BITCOIN_GUIDANCE))
        if any(a.is_non_fungible for a in assets):
            blocks.append(("NFT Marketplace and Royalty Information", config.NFT,
                           "IMPORTANT: Non-Fungible Tokens (NFTs) have unique characteristics "
                           "that executors should understand:",
                           NFT_GUIDANCE))
        for title, color, lead, items in blocks:
            ctx = draw_section_band(self.renderer, ctx, title, color)
            ctx = self.write(ctx, lead, size=11, bold=True, color=config.WARNING)
            ctx = ctx.advance(LINE * 0.5)
            for item in items:
                indent = 20 if item.startswith("   ") else 0
                ctx = self.write(ctx, item.strip(), indent=indent, size=10, color=config.INK)
                ctx = ctx.advance(4)
            ctx = ctx.advance(SECTION_GAP)
        return ctx

    def section_instructions(self, ctx):
        """Owner's free-text instructions, one layout pass per paragraph"""
        ctx = draw_section_band(self.renderer, ctx, "Instructions for Executor", config.HEADER)
        ctx = self.write(ctx, "The executor named above should already be aware of this document "
                              "and know where to find it. The following instructions provide "
                              "details for locating and accessing the crypto assets described in "
                              "this document.", size=11, color=config.CHARCOAL)
        ctx = ctx.advance(LINE * 0.75)

        paragraphs = [p.strip() for p in self.packet.key_instructions.split("\n") if p.strip()]
        if not paragraphs:
            paragraphs = ["No instructions provided."]
        for paragraph in paragraphs:
            ctx = ensure_space(self.renderer, ctx, 35)
            ctx = self.write(ctx, paragraph, size=11, color=config.INK)
            ctx = ctx.advance(LINE * 0.5)
        return ctx.advance(SECTION_GAP)

    def section_notarization(self, ctx):
        r = self.renderer
        owner = self.packet.owner
        owner_name = owner.display_name or "the Owner"
        executor_name = self.packet.executor.name or "the Executor"
        state = owner.state or "STATE"
        county = owner.county or config.BLANK_LINE

        ctx = draw_section_band(r, ctx, "Acknowledgment and Notarization", config.HEADER,
                                follow=LINE * 6)
        ctx = self.write(ctx, f"State of {state}", size=13, bold=True, color=config.INK)
        ctx = self.write(ctx, f"County of {county}", size=13, color=config.CHARCOAL)
        ctx = ctx.advance(LINE)
        ctx = self.write(ctx, f"On this _____ day of ___________, 20____, before me, a Notary Public "
                              f"in and for the State of {state}, County of {county}, personally "
                              f"appeared {owner_name}, known to me (or proved to me on the basis of "
                              "satisfactory evidence) to be the person whose name is subscribed to "
                              "this instrument, and acknowledged that they executed the same as "
                              "their free and voluntary act for the purposes therein contained.",
                         size=10, color=config.INK)
        ctx = ctx.advance(LINE)
        ctx = self.write(ctx, "WITNESS my hand and official seal.", size=12, bold=True,
                         color=config.INK)
        ctx = ctx.advance(LINE * 2)

        ctx = ensure_space(r, ctx, LINE * 7)
        ctx = self.write(ctx, "OWNER ACKNOWLEDGMENT", size=12, bold=True, color=config.INK)
        ctx = ctx.advance(LINE * 0.75)
        ctx = self.signature_line(ctx, "Date:")
        ctx = self.signature_line(ctx, "Owner Signature:")
        ctx = self.write(ctx, f"Printed Name: {owner_name}", size=11)
        ctx = ctx.advance(LINE * 1.5)

        ctx = ensure_space(r, ctx, LINE * 8)
        ctx = self.write(ctx, "EXECUTOR ACCEPTANCE", size=12, bold=True, color=config.INK)
        ctx = ctx.advance(LINE * 0.5)
        ctx = self.write(ctx, f"I, {executor_name}, acknowledge that {owner_name} has named me "
                              "executor of the digital assets described in this document.",
                         size=10, color=config.INK)
        ctx = ctx.advance(LINE * 0.75)
        ctx = self.signature_line(ctx, "Executor Signature:")
        ctx = self.signature_line(ctx, "Date:")
        ctx = ctx.advance(LINE * 0.5)

        ctx = ensure_space(r, ctx, LINE * 10)
        ctx = self.write(ctx, "NOTARY PUBLIC ACKNOWLEDGMENT", size=12, bold=True, color=config.INK)
        ctx = ctx.advance(LINE * 0.75)
        for label in ("Notary Public Signature:", "Notary Printed Name:",
                      "Notary Commission Number:", "Notary Commission Expires:"):
            ctx = self.signature_line(ctx, label)
        ctx = ctx.advance(LINE * 0.5)

        seal_h = 50
        ctx = ensure_space(r, ctx, LINE * 3 + seal_h + 10)
        ctx = self.write(ctx, "NOTARY STAMP / SEAL AREA", size=13, bold=True, color=config.INK)
        ctx = self.write(ctx, "(Place notary stamp or seal in this area)", size=10,
                         color=config.MUTED)
        ctx = ctx.advance(LINE * 0.5)
        r.stroke_rect(ctx, MARGIN + 50, ctx.y - seal_h, ctx.content_width - 100, seal_h,
                      config.RULE_GRAY, 2)
        return ctx.advance(seal_h + SECTION_GAP)

    def section_footer(self, ctx):
        """Document number and date, drawn once at the end of the packet"""
        r = self.renderer
        ctx = ensure_space(r, ctx, 40)
        r.line(ctx, MARGIN, ctx.y, ctx.page_width - MARGIN, ctx.y, config.RULE_GRAY, 0.5)
        ctx = ctx.advance(14)
        r.text(ctx, MARGIN, ctx.y,
               f"Document Number: {self.doc_number} | Generated by {config.PRODUCT_NAME} "
               f"on {self.date_text}", size=8, color=config.MUTED)
        ctx = ctx.advance(10)
        r.text(ctx, MARGIN, ctx.y, FOOTER_DISCLAIMER, size=7, color=config.MUTED)
        return ctx.advance(10)

    # ═══════════════════════════════════════════════════
    # MAIN GENERATION
    # ═══════════════════════════════════════════════════

    def compose(self):
        """Lay out every section in order and return the final context"""
        sections = [
            self.section_title,
            self.section_disclaimer,
            self.section_owner,
            self.section_wallets,
            self.section_beneficiary_wallets,
            self.section_executor,
            self.section_beneficiaries,
            self.section_summary,
            self.section_by_chain,
            self.section_guidance,
            self.section_instructions,
            self.section_notarization,
            self.section_footer,
        ]
        ctx = self.renderer.start()
        for section in sections:
            logger.debug("Composing %s", section.__name__)
            ctx = section(ctx)
        logger.info("Composed packet %s: %d pages", self.doc_number, self.renderer.page_count)
        return ctx
