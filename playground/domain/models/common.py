"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like provider tags, external
identifiers and search terms, ensuring consistency and type safety.
"""

from typing import NewType

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
ProviderTag = NewType("ProviderTag", str)      # "Discogs", "MusicBrainz", "MailTm"
ExternalId = NewType("ExternalId", str)        # Provider-side identifier of a release
SearchText = NewType("SearchText", str)        # Free-form query typed by the user

# === Mail Context ===
MessageId = NewType("MessageId", str)
AccountId = NewType("AccountId", str)

# === Provider tags ===
DISCOGS = ProviderTag("Discogs")
MUSICBRAINZ = ProviderTag("MusicBrainz")
MAILTM = ProviderTag("MailTm")
