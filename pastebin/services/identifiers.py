"""
Pastebin Backend - Paste Identifier Generator
==============================================

What:  Produces the short random identifiers that name pastes.
How:   Draws each character independently from ALPHABET using the `secrets`
       module (OS entropy, no seeding).

Collision domain:
    len(ALPHABET) ** length possible ids (55 ** 8 ≈ 8.4e13 for the default
    length). Uniqueness is not guaranteed here; PasteStore.create refuses an
    id that already exists and PasteService retries with a fresh one.
"""

import secrets

# Depending on the font various glyphs get confused:
#   O looks like 0
#   i looks like l looks like 1 looks like I looks like L
# All of them are left out.
ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789abcdefghjkmnopqrstuvwxyz"

AMBIGUOUS_CHARACTERS = frozenset("0O1lIiL")


def generate_id(length: int) -> str:
    """Return a random string of exactly `length` characters from ALPHABET."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
