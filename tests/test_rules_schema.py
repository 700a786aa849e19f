import pytest
from pydantic import ValidationError

from bisca.rules_schema import MatchConfig, RoomConfig, RuleSet, ServerSettings


def test_defaults():
    rules = RuleSet.default()
    assert rules.play.first_lead_must_be_trump is True
    assert rules.match.total_hands == 3
    assert rules.room.capacity == 4
    assert rules.room.trick_pause_seconds == 1.5
    assert rules.room.auto_start_when_full is True


@pytest.mark.parametrize("capacity", [1, 5])
def test_room_capacity_bounds(capacity):
    with pytest.raises(ValidationError):
        RoomConfig(capacity=capacity)


def test_match_needs_positive_hands():
    with pytest.raises(ValidationError):
        MatchConfig(total_hands=0)


def test_negative_pause_rejected():
    with pytest.raises(ValidationError):
        RoomConfig(trick_pause_seconds=-1)


def test_server_settings_from_env():
    settings = ServerSettings.from_env(
        {
            "BISCA_ALLOWED_ORIGINS": "http://localhost:5173, http://localhost:3000",
            "BISCA_TRICK_PAUSE_SECONDS": "0.25",
            "BISCA_LOG_LEVEL": "debug",
            "PORT": "8080",
        }
    )
    assert settings.allowed_origins == ["http://localhost:5173", "http://localhost:3000"]
    assert settings.trick_pause_seconds == 0.25
    assert settings.log_level == "DEBUG"
    assert settings.port == 8080


def test_server_settings_defaults_and_validation():
    settings = ServerSettings.from_env({})
    assert settings.allowed_origins == ["*"]
    assert settings.port == 3000
    with pytest.raises(ValidationError):
        ServerSettings.from_env({"BISCA_LOG_LEVEL": "chatty"})
    with pytest.raises(ValidationError):
        ServerSettings.from_env({"BISCA_ALLOWED_ORIGINS": " , "})
