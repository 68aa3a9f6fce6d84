"""Runtime configuration for geocoins."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEED = (
    "In the beginning, the universe was created. "
    "This has made a lot of people very angry and been widely regarded as a bad move."
)


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="GEOCOINS_", env_file=".env", extra="ignore")

    app_name: str = "geocoins"
    log_level: str = "INFO"
    tile_width: float = Field(default=1e-4, gt=0, description="Width of one grid cell in degrees.")
    visibility_radius: int = Field(default=8, ge=0, description="Cells visible in each direction around the player.")
    spawn_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    max_initial_coins: int = Field(default=5, ge=0)
    seed: str = DEFAULT_SEED
    start_lat: float = 36.98949379578401
    start_long: float = -122.06277128548504
    state_dir: str = Field(default="~/.geocoins", description="Directory holding the saved session.")
    state_key: str = "mapState"
    max_known_cells: int | None = Field(
        default=None,
        ge=1,
        description="Optional bound on interned grid cells; unbounded when unset.",
    )


settings = Settings()
