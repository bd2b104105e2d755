from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# STRIPE PALETTE
# =============================================================================

# Default sleeve paint palette, in assignment order.
# Adjacent entries are chosen to be easy to tell apart on a sleeve edge.
DEFAULT_PALETTE: tuple[str, ...] = (
    "#ECC933",  # Yellow
    "#558CC1",  # Blue
    "#6B5597",  # Purple
    "#C73D2B",  # Red
    "#70AF63",  # Green
    "#EEEEEE",  # White
    "#7A5E68",  # Brown
    "#3C5890",  # Navy
    "#C76B61",  # Salmon
    "#A3C569",  # Light-Green
    "#D69F5D",  # Gold
    "#5A9FD7",  # Light-Blue
    "#F5F4CF",  # Cream
    "#AC638C",  # Maroon
    "#CFD964",  # Lime
    "#746BA9",  # Grape
    "#D388B2",  # Pink
    "#D4BC2E",  # Dark Yellow
    "#569899",  # Teal
    "#ECCAD7",  # Pale-Pink
    "#CCA427",  # Straw
    "#C2CCD2",  # Silver
)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PRISM_")

    app_name: str = "PRISM"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./prism.db"

    # Hard cap on decks per collection, independent of palette size
    max_decks: int = 15

    color_palette: list[str] = list(DEFAULT_PALETTE)

    moxfield_api_url: str = "https://api2.moxfield.com/v3/decks/all"
    request_timeout: float = 30.0


settings = Settings()


# =============================================================================
# PROCESSING CONSTANTS
# =============================================================================

# Number of entries in Statistics.most_shared_cards
MOST_SHARED_LIMIT = 5

# Number of entries in OverlapReport.most_shared
OVERLAP_MOST_SHARED_LIMIT = 10

# JSON snapshot format version written by the export layer
SNAPSHOT_VERSION = "1.0"

# Storage document schema version
STORAGE_VERSION = 1

# Bracket bounds (Commander power level)
MIN_BRACKET = 1
MAX_BRACKET = 4
