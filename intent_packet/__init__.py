"""
Digital Asset Intent Packet generator.

Turns validated crypto asset allocations into a printable PDF of
instructions for an executor.
"""
import logging

from intent_packet.composer import PacketComposer, document_number
from intent_packet.errors import PacketError, PacketGenerationError
from intent_packet.images import fetch_image, prefetch_images
from intent_packet.logging_config import document_context, setup_logging
from intent_packet.normalize import normalize_packet
from intent_packet.renderer import Renderer

__version__ = "0.1.0"

__all__ = [
    "PacketError",
    "PacketGenerationError",
    "build_packet",
    "generate_packet",
    "setup_logging",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def build_packet(owner, executor, beneficiaries, allocations, assets, wallet_providers=None, *,
                 wallet_names=None, connected_wallets=None, wallet_groups=None,
                 key_instructions="", generated_at=None, image_fetcher=None):
    """Lay out a packet and return the renderer, not yet finalized."""
    packet = normalize_packet(
        owner, executor, beneficiaries, allocations, assets,
        wallet_providers=wallet_providers,
        wallet_names=wallet_names,
        connected_wallets=connected_wallets,
        wallet_groups=wallet_groups,
        key_instructions=key_instructions,
        generated_at=generated_at,
    )
    with document_context(document_number(packet.generated_at)):
        images = prefetch_images(packet.assets, fetcher=image_fetcher or fetch_image)
        renderer = Renderer()
        PacketComposer(packet, renderer, images).compose()
    return renderer


def generate_packet(owner, executor, beneficiaries, allocations, assets, wallet_providers=None, *,
                    wallet_names=None, connected_wallets=None, wallet_groups=None,
                    key_instructions="", generated_at=None, image_fetcher=None):
    """
    Generate the packet PDF and return its bytes.

    Either the complete document is returned or PacketGenerationError is
    raised; there is no partial output.
    """
    try:
        renderer = build_packet(
            owner, executor, beneficiaries, allocations, assets, wallet_providers,
            wallet_names=wallet_names,
            connected_wallets=connected_wallets,
            wallet_groups=wallet_groups,
            key_instructions=key_instructions,
            generated_at=generated_at,
            image_fetcher=image_fetcher,
        )
        return renderer.finalize()
    except PacketGenerationError:
        raise
    except Exception as exc:
        logger.error("Packet generation failed: %s", exc, exc_info=True)
        raise PacketGenerationError(f"Packet generation failed: {exc}") from exc
