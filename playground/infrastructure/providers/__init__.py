"""Provider adapters.

HTTP clients for Discogs, MusicBrainz and mail.tm. Each network call goes
through the shared ResilientExecutor and its JSON is decoded into the
domain records.
Bounded Context: External Providers
"""
