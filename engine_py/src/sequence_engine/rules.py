"""
Game rule configuration and validation.
"""

from pydantic import BaseModel, Field, field_validator

from .constants import SEQUENCE_LENGTH
from .models import PLAYER_TOKENS


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    sequences_to_win: int = Field(
        default=2,
        ge=1,
        le=4,
        description="Completed sequences a player needs to win"
    )
    sequence_length: int = Field(
        default=SEQUENCE_LENGTH,
        ge=3,
        le=10,
        description="Tokens in a row that make up one sequence"
    )
    min_players: int = Field(
        default=2,
        ge=2,
        le=12,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=12,
        ge=2,
        le=12,
        description="Maximum number of players allowed by the rules"
    )
    players_per_match: int = Field(
        default=2,
        ge=2,
        le=len(PLAYER_TOKENS),
        description="Seats per match; the match starts once they are filled"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't fall below minimum."""
        min_players = info.data.get('min_players', 2)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)
