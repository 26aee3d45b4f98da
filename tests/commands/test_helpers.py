from __future__ import annotations

import pytest

from travtrack.commands._helpers import ArgError, parse_index, resolve_character

CTX = {"characters": ("Andrew – Dr Vax Vanderpool", "Nicole – Admiral Rosa Perre", "Nina – Scout")}


@pytest.mark.parametrize("token", ["", "party", "PARTY", "ship"])
def test_party_tokens(token):
    assert resolve_character(CTX, token) is None


def test_player_prefix_and_full_name():
    assert resolve_character(CTX, "andrew") == "Andrew – Dr Vax Vanderpool"
    assert resolve_character(CTX, "Nicole – Admiral Rosa Perre") == "Nicole – Admiral Rosa Perre"
    assert resolve_character(CTX, "nic") == "Nicole – Admiral Rosa Perre"


def test_ambiguous_and_unknown():
    with pytest.raises(ArgError, match="more than one"):
        resolve_character(CTX, "ni")
    with pytest.raises(ArgError, match="No character"):
        resolve_character(CTX, "zed")


def test_parse_index():
    assert parse_index("1") == 0
    with pytest.raises(ArgError):
        parse_index("0")
    with pytest.raises(ArgError):
        parse_index("one")
