"""Shared constants for the export and import pipelines."""

# Layouts whose second face carries its own artwork
DUAL_FACED_LAYOUTS = frozenset(
    {
        "transform",
        "modal_dfc",
        "double_faced_token",
        "reversible_card",
        "art_series",
    }
)

# Image sizes in order of preference when reading catalog image_uris
IMAGE_SIZE_PREFERENCE = ("normal", "large", "png")

# Local asset shown when a printing exposes no artwork at all
PLACEHOLDER_IMAGE = "./assets/magic_card_back.png"

# Archive naming
TOKEN_PREFIX = "_token_"
IMAGE_EXTENSION = ".jpg"

# Physical page (A4, portrait) in millimetres
A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
GAP_MM = 0.3

# all_parts component marking an associated token
TOKEN_COMPONENT = "token"
