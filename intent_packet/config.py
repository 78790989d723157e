"""
Packet Generator Configuration
Page geometry, fonts, palette and image fetch tuning.
"""

import os

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import LETTER

PRODUCT_NAME = "LastWishCrypto"
DOCUMENT_TITLE = "UNIFORM DIGITAL ASSET INTENT PACKET"

# ─── PAGE GEOMETRY ───
PAGE_WIDTH, PAGE_HEIGHT = LETTER  # 612 x 792
MARGIN = 50
TOP_Y = 750  # first baseline on a fresh page
MIN_Y = 50
CONTENT_W = PAGE_WIDTH - 2 * MARGIN

LINE_HEIGHT = 20
SECTION_SPACING = 30
BAND_HEIGHT = 24

# ─── FONTS ───
# Standard PDF fonts, WinAnsi encoded: printable ASCII + Latin-1 only
FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

# ─── COLOR PALETTE ───
INK = Color(0.1, 0.1, 0.1)
CHARCOAL = Color(0.2, 0.2, 0.2)
SLATE = Color(0.3, 0.3, 0.3)
MUTED = Color(0.5, 0.5, 0.5)
RULE_GRAY = Color(0.7, 0.7, 0.7)
WHITE = HexColor('#FFFFFF')

HEADER = Color(0.1, 0.2, 0.5)
TITLE = Color(0.2, 0.3, 0.7)
WARNING = Color(0.9, 0.5, 0.1)
SUCCESS = Color(0.1, 0.7, 0.3)
BENEFICIARY = Color(0.6, 0.2, 0.7)
ENS = Color(0, 0.6, 0)
BITCOIN = Color(0.9, 0.6, 0.1)
NFT = Color(0.8, 0.2, 0.6)

# Wallet colors, assigned cyclically by wallet position
WALLET_COLORS = [
    Color(0.2, 0.4, 0.8),   # Blue
    Color(0.8, 0.3, 0.2),   # Red/Orange
    Color(0.2, 0.7, 0.4),   # Green
    Color(0.7, 0.2, 0.7),   # Purple
    Color(0.9, 0.6, 0.1),   # Gold
    Color(0.1, 0.7, 0.8),   # Cyan
    Color(0.8, 0.5, 0.1),   # Orange
    Color(0.5, 0.2, 0.8),   # Violet
    Color(0.2, 0.8, 0.6),   # Teal
    Color(0.9, 0.3, 0.5),   # Pink
]
PALETTE_SIZE = len(WALLET_COLORS)

BAND_OPACITY = 0.12

# ─── NFT BLOCK ───
NFT_IMAGE_SIZE = 60
NFT_BLOCK_HEIGHT = NFT_IMAGE_SIZE + 15

# ─── IMAGE FETCHING ───
IPFS_GATEWAY = "https://ipfs.io/ipfs/"
ARWEAVE_GATEWAY = "https://arweave.net/"
ORDINAL_PROXY_PATH = "/api/ordinal-image"
ORDINAL_CONTENT_SOURCES = [
    "https://ord.io/preview/{id}",
    "https://ord.io/content/{id}",
    "https://api.hiro.so/ordinals/v1/inscriptions/{id}/content",
    "https://ordinals.com/content/{id}",
]

IMAGE_FETCH_TIMEOUT = float(os.environ.get("INTENT_PACKET_IMAGE_TIMEOUT", "10"))
IMAGE_FETCH_WORKERS = int(os.environ.get("INTENT_PACKET_IMAGE_WORKERS", "4"))
IMAGE_MAX_BYTES = int(os.environ.get("INTENT_PACKET_IMAGE_MAX_BYTES", str(5 * 1024 * 1024)))
IMAGE_CHUNK_SIZE = 8192

# ─── LOGGING ───
LOG_LEVEL = os.environ.get("INTENT_PACKET_LOG_LEVEL", "INFO")

NOT_PROVIDED = "Not provided"
BLANK_LINE = "_________________"
