"""Shared identities for registry tests."""

ADMIN = "0xAdmin000000000000000000000000000000000001"
ALICE = "0xA11ce00000000000000000000000000000000002"
BOB = "0xB0b0000000000000000000000000000000000003"
CAROL = "0xCa7010000000000000000000000000000000004"
